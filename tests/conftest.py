"""
Pytest fixtures for canvas_bridge tests.
"""

import json

import pytest
import requests
from unittest.mock import MagicMock

import canvas_bridge.client as client_module
from canvas_bridge.client import CanvasClient

BASE_URL = "https://canvas.test.edu"


def make_response(status_code=200, json_body=None, content=None, reason="OK"):
    """Build a real requests.Response with the given status and body."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response.url = f"{BASE_URL}/api/v1/test"
    if json_body is not None:
        response._content = json.dumps(json_body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = content if content is not None else b""
    return response


def sent(canvas_client, index=-1):
    """Return (method, url, kwargs) of a request the client sent."""
    call = canvas_client.session.request.call_args_list[index]
    method, url = call.args
    return method, url, call.kwargs


@pytest.fixture
def canvas_client():
    """CanvasClient whose session.request is a mock returning an empty list."""
    client = CanvasClient(BASE_URL, "test-token")
    client.session.request = MagicMock(return_value=make_response(json_body=[]))
    return client


@pytest.fixture
def installed_client(canvas_client):
    """Install the mock client as the global client used by domain modules."""
    client_module._canvas_client = canvas_client
    yield canvas_client
    client_module._canvas_client = None


@pytest.fixture
def sample_users():
    return [
        {
            "id": 101,
            "name": "Ada Lovelace",
            "sortable_name": "Lovelace, Ada",
            "short_name": "Ada",
            "email": "ada@example.edu",
            "login_id": "alovelace",
            "sis_user_id": "S-101",
            "avatar_url": "https://canvas.test.edu/images/ada.png",
            "created_at": "2024-01-01T00:00:00Z",
        },
        {
            "id": 102,
            "name": "Alan Turing",
            "sortable_name": "Turing, Alan",
            "email": "alan@example.edu",
            "created_at": "2024-01-02T00:00:00Z",
        },
    ]


@pytest.fixture
def sample_submissions():
    return [
        {
            "id": 9001,
            "user_id": 101,
            "assignment_id": 55,
            "score": 88.0,
            "grade": "88",
            "workflow_state": "graded",
            "late": False,
            "user": {"id": 101, "name": "Ada Lovelace", "email": "ada@example.edu"},
            "submission_comments": [
                {
                    "id": 1,
                    "author_id": 7,
                    "author_name": "Prof. Hopper",
                    "comment": "Nice proof.",
                    "author": {"id": 7, "display_name": "Prof. Hopper", "avatar_image_url": "x.png"},
                },
            ],
        },
        {
            "id": 9002,
            "user_id": 102,
            "assignment_id": 55,
            "score": None,
            "grade": None,
            "workflow_state": "unsubmitted",
            "late": False,
        },
    ]
