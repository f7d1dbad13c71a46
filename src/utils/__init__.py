"""
Utils package.

Conventions:
- Models are Pydantic models serialized with camelCase aliases.
- Transaction dates are ISO-8601 timestamps at midnight UTC.
- Amounts are Decimal; expenses are stored negative and income positive.
- Models persisted to DynamoDB implement `to_dynamodb_item()`.
"""
