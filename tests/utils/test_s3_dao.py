"""
Unit tests for the S3 DAO module.
"""
import os
import unittest
from unittest.mock import patch

import boto3
from moto import mock_aws

from utils.s3_dao import (
    get_object,
    get_object_content,
    get_object_metadata,
)

TEST_BUCKET = 'test-import-bucket'


@patch.dict(os.environ, {'S3_IMPORT_BUCKET': TEST_BUCKET, 'AWS_REGION': 'eu-west-2'})
class TestS3DAO(unittest.TestCase):
    """Test cases for S3 DAO operations."""

    def setUp(self):
        """Set up test environment."""
        self.mock_aws = mock_aws()
        self.mock_aws.start()

        self.s3_client = boto3.client('s3', region_name='eu-west-2')
        self.s3_client.create_bucket(
            Bucket=TEST_BUCKET,
            CreateBucketConfiguration={'LocationConstraint': 'eu-west-2'}
        )

        self.test_key = 'user-1/file-1/statement.csv'
        self.test_content = b'date,description,amount\n2024-01-05,Coffee,-4.50\n'
        self.s3_client.put_object(
            Bucket=TEST_BUCKET,
            Key=self.test_key,
            Body=self.test_content,
            ContentType='text/csv'
        )

    def tearDown(self):
        """Clean up test environment."""
        self.mock_aws.stop()

    def test_get_object_content_uses_configured_bucket(self):
        self.assertEqual(get_object_content(self.test_key), self.test_content)

    def test_get_object_content_explicit_bucket(self):
        self.s3_client.create_bucket(
            Bucket='other-bucket',
            CreateBucketConfiguration={'LocationConstraint': 'eu-west-2'}
        )
        self.s3_client.put_object(Bucket='other-bucket', Key='k.csv', Body=b'x')
        self.assertEqual(get_object_content('k.csv', bucket='other-bucket'), b'x')

    def test_missing_object_returns_none(self):
        self.assertIsNone(get_object('user-1/missing.csv'))
        self.assertIsNone(get_object_content('user-1/missing.csv'))
        self.assertIsNone(get_object_metadata('user-1/missing.csv'))

    def test_get_object_metadata(self):
        metadata = get_object_metadata(self.test_key)
        self.assertEqual(metadata['content_type'], 'text/csv')
        self.assertEqual(metadata['content_length'], len(self.test_content))
        self.assertIsNotNone(metadata['e_tag'])


if __name__ == '__main__':
    unittest.main()
