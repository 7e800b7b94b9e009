# routers/__init__.py
#
# Each module exposes ``router``; main.create_app() includes them.
