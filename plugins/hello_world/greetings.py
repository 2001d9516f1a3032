def greeting_for(name: str) -> str:
    return f"Hello, {name}!"
