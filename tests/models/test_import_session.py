"""
Tests for the ImportSession model.
"""
import unittest

from pydantic import ValidationError

from models.column_mapping import ColumnMapping, TransactionType
from models.import_session import ImportSession, ImportStatus, ImportMode, StagedFile, ValidationIssue
from models.transaction import CandidateTransaction


class TestImportSession(unittest.TestCase):
    def setUp(self):
        self.session = ImportSession(user_id="user-1")

    def test_defaults(self):
        self.assertEqual(self.session.status, ImportStatus.IDLE)
        self.assertEqual(self.session.progress, 0)
        self.assertEqual(self.session.mode, ImportMode.STANDARD)
        self.assertEqual(self.session.template_id, "generic")
        self.assertEqual(self.session.selection, set())

    def test_progress_bounds_enforced_on_assignment(self):
        with self.assertRaises(ValidationError):
            self.session.progress = 101

    def test_staged_file_content_not_serialized(self):
        staged = StagedFile(file_name="a.csv", content=b"date\n1")
        self.assertEqual(staged.size, 6)
        self.assertNotIn("content", staged.model_dump())

    def test_clear_results(self):
        self.session.headers = ["a"]
        self.session.rows = [["1"]]
        self.session.selection = {0}
        self.session.error_message = "boom"
        self.session.inserted_count = 3

        self.session.clear_results()

        self.assertEqual(self.session.headers, [])
        self.assertEqual(self.session.rows, [])
        self.assertEqual(self.session.selection, set())
        self.assertIsNone(self.session.error_message)
        self.assertIsNone(self.session.inserted_count)

    def test_to_response(self):
        self.session.file = StagedFile(file_name="a.csv", content=b"x")
        self.session.headers = ["date", "description", "amount"]
        self.session.rows = [["2024-01-05", "Coffee", "-4"], ["2024-01-06", "Tea", "-3"]]
        self.session.mapping = ColumnMapping(date_column="date", amount_column="amount", description_column="description")
        self.session.candidates = [CandidateTransaction(
            raw_row_index=0, date="2024-01-05", amount="-4", description="Coffee",
            category="Uncategorized", type=TransactionType.EXPENSE,
        )]
        self.session.issues = [ValidationIssue(row_index=1, message="Row 2: Missing description")]
        self.session.selection = {1, 0}

        response = self.session.to_response()

        self.assertEqual(response["status"], "idle")
        self.assertEqual(response["fileName"], "a.csv")
        self.assertEqual(response["rowCount"], 2)
        self.assertEqual(response["mapping"]["dateColumn"], "date")
        self.assertIsNone(response["suggestedMapping"])
        self.assertEqual(response["candidates"][0]["rawRowIndex"], 0)
        self.assertEqual(response["issues"], [{"rowIndex": 1, "message": "Row 2: Missing description"}])
        self.assertEqual(response["selection"], [0, 1])
        self.assertEqual(response["sessionId"], str(self.session.session_id))


if __name__ == '__main__':
    unittest.main()
