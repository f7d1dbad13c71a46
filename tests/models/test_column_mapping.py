"""
Tests for the ColumnMapping model.
"""
import unittest

from pydantic import ValidationError

from models.column_mapping import ColumnMapping, TransactionType, DEFAULT_CATEGORY
from models.import_template import DateLayout
from utils.import_errors import FormatError

HEADERS = ["Date", "Details", "Amount", "Category", "Kind"]


class TestColumnMapping(unittest.TestCase):
    def test_from_dict_camel_case(self):
        mapping = ColumnMapping.from_dict({
            "dateColumn": "Date",
            "amountColumn": "Amount",
            "descriptionColumn": "Details",
            "categoryColumn": "",
            "typeColumn": "Kind",
            "dateFormat": "DD/MM/YYYY",
            "defaultCategory": "  ",
            "defaultType": "income",
        })
        self.assertEqual(mapping.date_column, "Date")
        self.assertIsNone(mapping.category_column)
        self.assertEqual(mapping.type_column, "Kind")
        self.assertEqual(mapping.date_layout, DateLayout.DMY)
        self.assertEqual(mapping.default_category, DEFAULT_CATEGORY)
        self.assertEqual(mapping.default_type, TransactionType.INCOME)

    def test_to_dict_round_trips(self):
        mapping = ColumnMapping(date_column="Date", amount_column="Amount", description_column="Details")
        data = mapping.to_dict()
        self.assertEqual(data["dateFormat"], "YYYY-MM-DD")
        self.assertEqual(data["defaultType"], "expense")
        self.assertEqual(ColumnMapping.from_dict(data), mapping)

    def test_unknown_keys_rejected(self):
        with self.assertRaises(ValidationError):
            ColumnMapping.from_dict({"dateColumn": "Date", "memoColumn": "Memo"})

    def test_unknown_layout_rejected(self):
        with self.assertRaises(ValidationError):
            ColumnMapping.from_dict({"dateFormat": "YYYY/DD/MM"})

    def test_unresolved_required_fields(self):
        mapping = ColumnMapping(amount_column="Amount")
        self.assertEqual(mapping.unresolved_required_fields(), ["date", "description"])


class TestCheckAgainstHeaders(unittest.TestCase):
    def test_valid_mapping_passes(self):
        ColumnMapping(
            date_column="Date", amount_column="Amount", description_column="Details",
            category_column="Category", type_column="Kind"
        ).check_against_headers(HEADERS)

    def test_missing_required_column(self):
        mapping = ColumnMapping(date_column="Date", amount_column="Amount")
        with self.assertRaises(FormatError) as ctx:
            mapping.check_against_headers(HEADERS)
        self.assertEqual(str(ctx.exception), "Could not find columns for: description")

    def test_column_not_in_file(self):
        mapping = ColumnMapping(date_column="Date", amount_column="Amount", description_column="Memo")
        with self.assertRaises(FormatError) as ctx:
            mapping.check_against_headers(HEADERS)
        self.assertIn("'Memo'", str(ctx.exception))

    def test_optional_column_not_in_file(self):
        mapping = ColumnMapping(
            date_column="Date", amount_column="Amount", description_column="Details", type_column="Direction"
        )
        with self.assertRaises(FormatError):
            mapping.check_against_headers(HEADERS)

    def test_duplicated_header_rejected(self):
        mapping = ColumnMapping(date_column="Date", amount_column="Amount", description_column="Details")
        with self.assertRaises(FormatError) as ctx:
            mapping.check_against_headers(["Date", "Details", "Amount", "Amount"])
        self.assertIn("more than once", str(ctx.exception))


if __name__ == '__main__':
    unittest.main()
