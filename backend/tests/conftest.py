"""
Pytest configuration and fixtures.

DynamoDB tables are replaced by in-memory fakes behind lib.dynamo.get_table.
S3 uses a real boto3 client with dummy credentials: presigning is offline and
calls that hit the network are stubbed with botocore's Stubber.
"""
import copy
import json

import pytest

from lib import dynamo, storage


class FakeTable:
    """Just enough of the boto3 Table resource for put/get/delete by key."""

    def __init__(self, name):
        self.name = name
        self.items = {}

    def put_item(self, Item):
        self.items[(Item["pk"], Item["sk"])] = copy.deepcopy(Item)
        return {}

    def get_item(self, Key, ConsistentRead=False):
        item = self.items.get((Key["pk"], Key["sk"]))
        return {"Item": copy.deepcopy(item)} if item else {}

    def delete_item(self, Key):
        self.items.pop((Key["pk"], Key["sk"]), None)
        return {}


@pytest.fixture(autouse=True)
def aws_env(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("OAUTH_STATES_TABLE_NAME", "oauth-states")
    monkeypatch.setenv("SOCIAL_CONNECTIONS_TABLE_NAME", "social-connections")
    monkeypatch.setenv("RENDER_STATE_TABLE_NAME", "render-state")
    monkeypatch.setenv("STORAGE_BUCKET_NAME", "videos")
    monkeypatch.setenv("APP_URL", "https://snip.example.com")
    monkeypatch.setenv("X_CLIENT_ID", "x-client-id")
    monkeypatch.setenv("X_CLIENT_SECRET", "x-client-secret")
    storage._client_cache.clear()
    yield
    storage._client_cache.clear()


@pytest.fixture(autouse=True)
def tables(monkeypatch):
    """Fake DynamoDB tables keyed by table name."""
    fakes = {}

    def fake_get_table(table_name=None):
        if not table_name:
            raise ValueError("DynamoDB table name is not configured")
        return fakes.setdefault(table_name, FakeTable(table_name))

    monkeypatch.setattr(dynamo, "get_table", fake_get_table)
    return fakes


def make_event(user_id=None, method="GET", body=None, query=None, path=None):
    """Build an API Gateway REST proxy event."""
    event = {
        "httpMethod": method,
        "headers": {"Host": "api.snip.example.com"},
        "queryStringParameters": query,
        "pathParameters": path,
        "requestContext": {"stage": "prod", "authorizer": {}},
        "body": json.dumps(body) if isinstance(body, dict) else body,
    }
    if user_id:
        event["requestContext"]["authorizer"]["claims"] = {"sub": user_id}
    return event


def body_of(response):
    return json.loads(response["body"])
