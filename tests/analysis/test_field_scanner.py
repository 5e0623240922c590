"""
Tests for FieldReferenceScanner and field helpers
"""

import unittest

from transitionflow.analysis.field_scanner import (
    FieldHit,
    FieldReferenceScanner,
    get_root_field,
    normalize_field,
    safe_stringify,
    strip_variable_braces,
)
from transitionflow.core.models import ReferenceKind


class TestFieldReferenceScanner(unittest.TestCase):
    """Test cases for FieldReferenceScanner"""

    def setUp(self):
        """Set up test fixtures"""
        self.scanner = FieldReferenceScanner()

    def test_scan_ctx_data(self):
        """Test ctx.data.<path> references"""
        hits = self.scanner.scan("await page.fill(ctx.data.user.email);")

        self.assertEqual(hits, [FieldHit('user.email', ReferenceKind.DATA)])

    def test_scan_test_data(self):
        """Test testData.<path> references"""
        self.assertEqual(self.scanner.scan_fields("testData.payment.method"), ['payment.method'])

    def test_scan_ctx_alias(self):
        """Test ctx.<path> shorthand"""
        self.assertEqual(self.scanner.scan_fields("if (ctx.flags.express) {}"), ['flags.express'])

    def test_ctx_alias_never_yields_data(self):
        """ctx.data alone is not a field"""
        self.assertEqual(self.scanner.scan("const d = ctx.data;"), [])

    def test_scan_variable(self):
        """Test {{variable}} references"""
        hits = self.scanner.scan("Bearer {{ authToken }}")

        self.assertEqual(hits, [FieldHit('authToken', ReferenceKind.VARIABLE)])

    def test_braced_data_reference_is_data(self):
        """{{ctx.data.x}} reads x from test data"""
        hits = self.scanner.scan("#ref-{{ctx.data.booking.ref}}")

        self.assertEqual(hits, [FieldHit('booking.ref', ReferenceKind.DATA)])

    def test_index_normalization(self):
        """Test that indexes collapse to []"""
        fields = self.scanner.scan_fields(
            "ctx.data.passengers.adults[0].name + ctx.data.passengers.adults[12].name"
        )

        self.assertEqual(fields, ['passengers.adults[].name'])

    def test_order_of_appearance(self):
        """Test hits keep the order they appear in"""
        fields = self.scanner.scan_fields("testData.b ctx.data.a {{c}}")

        self.assertEqual(fields, ['b', 'a', 'c'])

    def test_word_boundary(self):
        """myctx.data.x is not a reference"""
        self.assertEqual(self.scanner.scan("myctx.data.x"), [])

    def test_non_string_input(self):
        """Test non-string input yields nothing"""
        self.assertEqual(self.scanner.scan(None), [])
        self.assertEqual(self.scanner.scan(42), [])
        self.assertEqual(self.scanner.scan({'a': 1}), [])

    def test_scan_value_stringifies(self):
        """Test scan_value serializes containers first"""
        fields = [h.field for h in self.scanner.scan_value({'to': 'ctx.data.user.email'})]

        self.assertEqual(fields, ['user.email'])


class TestFieldHelpers(unittest.TestCase):
    """Test cases for helper functions"""

    def test_normalize_field(self):
        self.assertEqual(normalize_field('items[3].sku'), 'items[].sku')
        self.assertEqual(normalize_field('user.'), 'user')
        self.assertEqual(normalize_field(None), '')

    def test_get_root_field(self):
        self.assertEqual(get_root_field('passengers.adults[].name'), 'passengers')
        self.assertEqual(get_root_field('items[]'), 'items')
        self.assertEqual(get_root_field('lang'), 'lang')
        self.assertEqual(get_root_field(''), '')

    def test_safe_stringify(self):
        self.assertEqual(safe_stringify(None), '')
        self.assertEqual(safe_stringify(True), 'True')
        self.assertEqual(safe_stringify(3), '3')
        self.assertEqual(safe_stringify(['a']), '["a"]')
        self.assertEqual(safe_stringify(object()), '')

    def test_strip_variable_braces(self):
        self.assertEqual(strip_variable_braces('{{ userId }}'), 'userId')
        self.assertEqual(strip_variable_braces('userId'), 'userId')
        self.assertEqual(strip_variable_braces(5), '')


if __name__ == '__main__':
    unittest.main()
