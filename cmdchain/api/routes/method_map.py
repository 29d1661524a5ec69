"""Routes the server binds before any plugin adds its own."""

from typing import Any


BASE_ROUTE_MAP: dict[str, dict[str, Any]] = {
    "/status": {
        "GET": {"command": "getStatus"},
    },
    "/session": {
        "POST": {
            "command": "createSession",
            "payload_params": {"required": ["capabilities"]},
        },
    },
    "/session/{sessionId}": {
        "GET": {"command": "getSession"},
        "DELETE": {"command": "deleteSession"},
    },
    "/session/{sessionId}/timeouts": {
        "GET": {"command": "getTimeouts"},
        "POST": {
            "command": "timeouts",
            "payload_params": {"optional": ["script", "pageLoad", "implicit"]},
        },
    },
    "/session/{sessionId}/url": {
        "GET": {"command": "getUrl"},
        "POST": {"command": "setUrl", "payload_params": {"required": ["url"]}},
    },
}
