"""DynamoDB utilities.

Every table uses a composite ``pk``/``sk`` key. Items are written with
``put_item`` which replaces any existing item with the same key.
"""

import os
from decimal import Decimal

import boto3

_table_cache = {}


def get_table(table_name: str = None):
    """Get DynamoDB table resource (cached)."""
    resolved = table_name or os.environ.get("TABLE_NAME")
    if not resolved:
        raise ValueError("DynamoDB table name is not configured")
    if resolved not in _table_cache:
        dynamodb = boto3.resource("dynamodb")
        _table_cache[resolved] = dynamodb.Table(resolved)
    return _table_cache[resolved]


def to_dynamo(obj):
    """Convert floats to Decimal for DynamoDB compatibility."""
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: to_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [to_dynamo(v) for v in obj]
    return obj


def from_dynamo(obj):
    """Convert Decimal values read from DynamoDB back to int/float."""
    if isinstance(obj, Decimal):
        return int(obj) if obj == obj.to_integral_value() else float(obj)
    if isinstance(obj, dict):
        return {k: from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [from_dynamo(v) for v in obj]
    return obj


def put_item(item: dict, table_name: str = None):
    """Create or replace an item (last write wins)."""
    table = get_table(table_name)
    return table.put_item(Item=to_dynamo(item))


def get_item(pk: str, sk: str, table_name: str = None):
    """Get an item from the table, or None."""
    table = get_table(table_name)
    response = table.get_item(Key={"pk": pk, "sk": sk}, ConsistentRead=True)
    item = response.get("Item")
    return from_dynamo(item) if item else None


def delete_item(pk: str, sk: str, table_name: str = None):
    """Delete an item. Deleting a missing key is not an error."""
    table = get_table(table_name)
    return table.delete_item(Key={"pk": pk, "sk": sk})

