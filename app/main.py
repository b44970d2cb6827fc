"""ASGI entry point: ``uvicorn main:server_app``."""

from server import server

server_app = server.handler
