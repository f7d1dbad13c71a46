"""
Tests for the import operations Lambda handler.
"""
import json
import os
import unittest
from decimal import Decimal
from unittest.mock import patch

import boto3
from moto import mock_aws

from handlers.import_operations import handler
from utils.db import tables

USER_ID = 'user-1'
BUCKET = 'test-import-bucket'
TABLE_NAME = 'test-transactions'

GENERIC_CSV = (
    "date,description,amount,category,type\n"
    "2024-01-05,Coffee,4.50,Food,expense\n"
    "2024-01-06,Salary,2000,,income\n"
)


def _event(route, body=None, user_id=USER_ID):
    claims = {'sub': user_id, 'email': 'test@example.com'} if user_id else {}
    event = {
        'routeKey': route,
        'requestContext': {
            'requestId': 'req-1',
            'http': {'method': route.split(' ')[0]},
            'authorizer': {'jwt': {'claims': claims}},
        },
    }
    if body is not None:
        event['body'] = json.dumps(body)
    return event


def _call(route, body=None, **kwargs):
    response = handler(_event(route, body, **kwargs), None)
    return response['statusCode'], json.loads(response['body'])


@patch.dict(os.environ, {'TRANSACTIONS_TABLE': TABLE_NAME, 'S3_IMPORT_BUCKET': BUCKET})
class TestImportOperations(unittest.TestCase):
    def setUp(self):
        self.mock_aws = mock_aws()
        self.mock_aws.start()
        tables.reinitialize()

        dynamodb = boto3.resource('dynamodb', region_name='eu-west-2')
        self.table = dynamodb.create_table(
            TableName=TABLE_NAME,
            KeySchema=[{'AttributeName': 'transactionId', 'KeyType': 'HASH'}],
            AttributeDefinitions=[{'AttributeName': 'transactionId', 'AttributeType': 'S'}],
            BillingMode='PAY_PER_REQUEST'
        )
        self.s3 = boto3.client('s3', region_name='eu-west-2')
        self.s3.create_bucket(Bucket=BUCKET, CreateBucketConfiguration={'LocationConstraint': 'eu-west-2'})

    def tearDown(self):
        tables.reinitialize()
        self.mock_aws.stop()

    # Routing and auth

    def test_unauthenticated_request(self):
        status, body = _call('GET /imports/templates', user_id=None)
        self.assertEqual(status, 401)
        self.assertEqual(body, {'message': 'Unauthorized'})

    def test_unsupported_route(self):
        status, body = _call('DELETE /imports/templates')
        self.assertEqual(status, 400)
        self.assertIn('Unsupported route', body['message'])

    def test_list_templates(self):
        status, body = _call('GET /imports/templates')
        self.assertEqual(status, 200)
        ids = [template['id'] for template in body['templates']]
        self.assertEqual(ids, ['generic', 'chase', 'bankofamerica', 'wells_fargo', 'hsbc'])
        self.assertEqual(body['templates'][1]['dateFormat'], 'MM/DD/YYYY')

    # Preview

    def test_preview_inline_content(self):
        status, body = _call('POST /imports/preview', {'fileName': 'statement.csv', 'content': GENERIC_CSV})

        self.assertEqual(status, 200)
        self.assertEqual(body['status'], 'preview')
        self.assertEqual(body['selection'], [0, 1])
        self.assertEqual(body['candidates'][0]['description'], 'Coffee')
        self.assertEqual(body['mapping']['dateColumn'], 'date')

    def test_preview_validation_errors(self):
        csv = "date,description,amount\n2024-01-05,Coffee,abc\n2024-01-06,Tea,-3\n"
        status, body = _call('POST /imports/preview', {'fileName': 'statement.csv', 'content': csv})

        self.assertEqual(status, 200)
        self.assertEqual(body['status'], 'error')
        self.assertEqual(body['errorMessage'], 'Found 1 validation error(s)')
        self.assertEqual(body['issues'][0]['rowIndex'], 0)

    def test_preview_advanced_mode(self):
        status, body = _call('POST /imports/preview', {
            'fileName': 'statement.csv', 'content': GENERIC_CSV, 'mode': 'advanced'
        })
        self.assertEqual(status, 200)
        self.assertEqual(body['status'], 'mapping')
        self.assertEqual(body['suggestedMapping']['amountColumn'], 'amount')

    def test_preview_from_s3(self):
        key = f'{USER_ID}/file-1/statement.csv'
        self.s3.put_object(Bucket=BUCKET, Key=key, Body=GENERIC_CSV.encode('utf-8'), ContentType='text/csv')

        status, body = _call('POST /imports/preview', {'fileName': 'statement.csv', 's3Key': key})

        self.assertEqual(status, 200)
        self.assertEqual(body['status'], 'preview')
        self.assertEqual(body['rowCount'], 2)

    def test_preview_other_users_s3_key(self):
        key = 'someone-else/file-1/statement.csv'
        self.s3.put_object(Bucket=BUCKET, Key=key, Body=GENERIC_CSV.encode('utf-8'))

        status, body = _call('POST /imports/preview', {'fileName': 'statement.csv', 's3Key': key})
        self.assertEqual(status, 404)

    def test_preview_missing_s3_object(self):
        status, _ = _call('POST /imports/preview', {'fileName': 'statement.csv', 's3Key': f'{USER_ID}/nope.csv'})
        self.assertEqual(status, 404)

    def test_preview_requires_content(self):
        status, body = _call('POST /imports/preview', {'fileName': 'statement.csv'})
        self.assertEqual(status, 400)

        status, body = _call('POST /imports/preview', {'content': GENERIC_CSV})
        self.assertEqual(status, 400)

    def test_preview_rejects_non_string_fields(self):
        for field, value in [('fileName', 123), ('contentType', 5), ('templateId', ['chase'])]:
            body = {'fileName': 'statement.csv', 'content': GENERIC_CSV, field: value}
            status, response = _call('POST /imports/preview', body)
            self.assertEqual(status, 400, field)
            self.assertEqual(response['message'], f'{field} must be a string')

    def test_preview_non_string_file_name_from_s3(self):
        key = f'{USER_ID}/file-1/statement.csv'
        self.s3.put_object(Bucket=BUCKET, Key=key, Body=GENERIC_CSV.encode('utf-8'))

        status, _ = _call('POST /imports/preview', {'fileName': {'name': 'x'}, 's3Key': key})
        self.assertEqual(status, 400)

    @patch.dict(os.environ, {'IMPORT_MAX_FILE_BYTES': '64'})
    def test_preview_oversized_s3_object(self):
        key = f'{USER_ID}/file-1/statement.csv'
        self.s3.put_object(Bucket=BUCKET, Key=key, Body=GENERIC_CSV.encode('utf-8'), ContentType='text/csv')

        with patch('handlers.import_operations.get_object_content') as get_content:
            status, body = _call('POST /imports/preview', {'fileName': 'statement.csv', 's3Key': key})

        self.assertEqual(status, 422)
        self.assertEqual(body['message'], f'File is {len(GENERIC_CSV)} bytes; the limit is 64 bytes')
        get_content.assert_not_called()

    def test_preview_no_row_matches_header(self):
        csv = "date,description,amount\n2024-01-05,Coffee\n"
        status, body = _call('POST /imports/preview', {'fileName': 'statement.csv', 'content': csv})

        self.assertEqual(status, 200)
        self.assertEqual(body['status'], 'error')
        self.assertEqual(body['errorMessage'], "No rows match the header's column count")

    def test_preview_bad_json(self):
        event = _event('POST /imports/preview')
        event['body'] = '{not json'
        self.assertEqual(handler(event, None)['statusCode'], 400)

    def test_preview_rejects_non_csv(self):
        status, body = _call('POST /imports/preview', {
            'fileName': 'statement.pdf', 'content': 'x', 'contentType': 'application/pdf'
        })
        self.assertEqual(status, 422)
        self.assertEqual(body['message'], 'Please upload a CSV file')

    def test_preview_unknown_template(self):
        status, body = _call('POST /imports/preview', {
            'fileName': 'statement.csv', 'content': GENERIC_CSV, 'templateId': 'monzo'
        })
        self.assertEqual(status, 422)
        self.assertEqual(body['message'], 'Selected template not found')

    def test_preview_unknown_mode(self):
        status, _ = _call('POST /imports/preview', {
            'fileName': 'statement.csv', 'content': GENERIC_CSV, 'mode': 'expert'
        })
        self.assertEqual(status, 400)

    # Mapping

    def test_submit_mapping(self):
        csv = "Posted,Memo,Value\n05/01/2024,Coffee,-4.50\n"
        status, body = _call('POST /imports/mapping', {
            'fileName': 'statement.csv',
            'content': csv,
            'mapping': {
                'dateColumn': 'Posted',
                'descriptionColumn': 'Memo',
                'amountColumn': 'Value',
                'dateFormat': 'DD/MM/YYYY',
            },
        })

        self.assertEqual(status, 200)
        self.assertEqual(body['status'], 'preview')
        self.assertEqual(body['candidates'][0]['description'], 'Coffee')

    def test_submit_mapping_requires_mapping(self):
        status, _ = _call('POST /imports/mapping', {'fileName': 'statement.csv', 'content': GENERIC_CSV})
        self.assertEqual(status, 400)

    def test_submit_invalid_mapping_document(self):
        status, _ = _call('POST /imports/mapping', {
            'fileName': 'statement.csv', 'content': GENERIC_CSV, 'mapping': {'dateFormat': 'someday'}
        })
        self.assertEqual(status, 400)

    # Commit

    def test_commit_all_rows(self):
        status, body = _call('POST /imports/commit', {'fileName': 'statement.csv', 'content': GENERIC_CSV})

        self.assertEqual(status, 201)
        self.assertEqual(body['status'], 'success')
        self.assertEqual(body['insertedCount'], 2)

        items = sorted(self.table.scan()['Items'], key=lambda item: item['transactionDate'])
        self.assertEqual([item['amount'] for item in items], [Decimal('-4.5'), Decimal('2000')])
        self.assertTrue(all(item['userId'] == USER_ID for item in items))

    def test_commit_selection(self):
        status, body = _call('POST /imports/commit', {
            'fileName': 'statement.csv', 'content': GENERIC_CSV, 'selection': [1]
        })

        self.assertEqual(status, 201)
        self.assertEqual(body['insertedCount'], 1)
        [item] = self.table.scan()['Items']
        self.assertEqual(item['description'], 'Salary')

    def test_commit_empty_selection(self):
        status, body = _call('POST /imports/commit', {
            'fileName': 'statement.csv', 'content': GENERIC_CSV, 'selection': []
        })
        self.assertEqual(status, 400)
        self.assertEqual(body['message'], 'No transactions selected for import')
        self.assertEqual(self.table.scan()['Count'], 0)

    def test_commit_bad_selection(self):
        status, _ = _call('POST /imports/commit', {
            'fileName': 'statement.csv', 'content': GENERIC_CSV, 'selection': 'all'
        })
        self.assertEqual(status, 400)

        status, _ = _call('POST /imports/commit', {
            'fileName': 'statement.csv', 'content': GENERIC_CSV, 'selection': [5]
        })
        self.assertEqual(status, 400)

    def test_commit_invalid_file(self):
        csv = "date,description,amount\n2024-01-05,,-4\n"
        status, body = _call('POST /imports/commit', {'fileName': 'statement.csv', 'content': csv})

        self.assertEqual(status, 422)
        self.assertEqual(body['status'], 'error')
        self.assertEqual(body['issues'][0]['message'], 'Row 1: Missing description')
        self.assertEqual(self.table.scan()['Count'], 0)

    def test_commit_with_mapping(self):
        csv = "Posted,Memo,Value\n05/01/2024,Coffee,-4.50\n"
        status, body = _call('POST /imports/commit', {
            'fileName': 'statement.csv',
            'content': csv,
            'mapping': {
                'dateColumn': 'Posted',
                'descriptionColumn': 'Memo',
                'amountColumn': 'Value',
                'dateFormat': 'DD/MM/YYYY',
            },
        })

        self.assertEqual(status, 201)
        [item] = self.table.scan()['Items']
        self.assertEqual(item['transactionDate'], '2024-01-05T00:00:00+00:00')

    def test_commit_advanced_mode_without_mapping(self):
        status, _ = _call('POST /imports/commit', {
            'fileName': 'statement.csv', 'content': GENERIC_CSV, 'mode': 'advanced'
        })
        self.assertEqual(status, 400)

    @patch.dict(os.environ, {'TRANSACTIONS_TABLE': 'missing-table'})
    def test_commit_write_failure(self):
        status, body = _call('POST /imports/commit', {'fileName': 'statement.csv', 'content': GENERIC_CSV})

        self.assertEqual(status, 422)
        self.assertEqual(body['status'], 'error')
        self.assertIsNotNone(body['errorMessage'])
        self.assertEqual(self.table.scan()['Count'], 0)


if __name__ == '__main__':
    unittest.main()
