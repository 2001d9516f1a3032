# add-to-classpath $LIVEPLUG_LIBS
from pathlib import Path

from textkit import slugify

for script in sorted(Path(plugin_path).glob("*.py")):
    logger.info("%s -> %s", script.name, slugify(script.stem))
