# Minimal plugin: greets through the per-plugin logger.
from greetings import greeting_for

name = "startup" if is_startup else "world"
logger.info(greeting_for(name))
logger.info("Loaded from %s", plugin_path)
