"""
Tests for condition block utilities
"""

import unittest

from transitionflow.analysis.conditions import (
    OPERATORS,
    can_convert_to_simple_requires,
    conditions_to_requires,
    format_value,
    get_condition_block_summary,
    migrate_requires_to_conditions,
    validate_condition_block,
    validate_conditions,
)


def _check_block(*checks, **extra):
    block = {'type': 'condition-check', 'enabled': True, 'data': {'checks': list(checks)}}
    block.update(extra)
    return block


class TestMigration(unittest.TestCase):
    """Test requires <-> conditions conversion"""

    def test_migrate_requires(self):
        conditions = migrate_requires_to_conditions({'isLoggedIn': True, 'age': 18, 'lang': 'pt'})

        block = conditions['blocks'][0]
        self.assertEqual(block['type'], 'condition-check')
        self.assertTrue(block['enabled'])
        checks = block['data']['checks']
        self.assertEqual([c['field'] for c in checks], ['isLoggedIn', 'age', 'lang'])
        self.assertEqual([c['valueType'] for c in checks], ['boolean', 'number', 'string'])
        self.assertTrue(all(c['operator'] == 'equals' for c in checks))
        self.assertTrue(checks[0]['id'].startswith('chk_'))

    def test_migrate_empty(self):
        self.assertIsNone(migrate_requires_to_conditions({}))
        self.assertIsNone(migrate_requires_to_conditions(None))

    def test_round_trip(self):
        requires = {'isLoggedIn': True, 'lang': 'pt'}

        self.assertEqual(conditions_to_requires(migrate_requires_to_conditions(requires)), requires)

    def test_not_convertible(self):
        non_equals = {'blocks': [_check_block({'field': 'a', 'operator': 'exists'})]}
        two_blocks = {'blocks': [_check_block(), _check_block()]}
        custom = {'blocks': [{'type': 'custom-code', 'enabled': True, 'code': 'x'}]}

        for conditions in (non_equals, two_blocks, custom, None):
            self.assertFalse(can_convert_to_simple_requires(conditions))


class TestSummary(unittest.TestCase):
    """Test block summaries"""

    def test_single_check(self):
        block = _check_block({'field': 'user.role', 'operator': 'equals', 'value': 'admin'})

        self.assertEqual(get_condition_block_summary(block), 'user.role = "admin"')

    def test_single_check_without_value(self):
        block = _check_block({'field': 'token', 'operator': 'exists'})

        self.assertEqual(get_condition_block_summary(block), 'token ∃')

    def test_multiple_checks(self):
        block = _check_block({'field': 'a', 'operator': 'exists'},
                             {'field': 'b', 'operator': 'exists'}, mode='any')

        self.assertEqual(get_condition_block_summary(block), '2 checks (ANY)')

    def test_custom_code(self):
        block = {'type': 'custom-code', 'code': 'const a = 1;\n\nreturn a;'}

        self.assertEqual(get_condition_block_summary(block), '2 lines')

    def test_no_checks(self):
        self.assertEqual(get_condition_block_summary(_check_block()), 'No checks')


class TestValidation(unittest.TestCase):
    """Test block validation messages"""

    def test_valid_block(self):
        block = _check_block({'field': 'a', 'operator': 'equals', 'value': 0})

        self.assertEqual(validate_condition_block(block), [])

    def test_check_errors(self):
        block = _check_block({'operator': 'equals', 'value': 1},
                             {'field': 'a', 'operator': 'bogus'},
                             {'field': 'b', 'operator': 'contains', 'value': ''})

        self.assertEqual(validate_condition_block(block), [
            'Check 1: Field is required',
            'Check 2: Unknown operator "bogus"',
            'Check 3: Value is required for "contains"',
        ])

    def test_custom_code_required(self):
        self.assertEqual(validate_condition_block({'type': 'custom-code', 'code': '  '}),
                         ['Code is required'])

    def test_unknown_type(self):
        self.assertEqual(validate_condition_block({'type': 'other'}), ['Unknown block type "other"'])

    def test_validate_conditions_prefixes(self):
        conditions = {'blocks': [
            _check_block({'field': 'a', 'operator': 'equals', 'value': 1}),
            {'type': 'custom-code', 'label': 'Script'},
        ]}

        self.assertEqual(validate_conditions(conditions), ['Block 2 (Script): Code is required'])

    def test_validate_conditions_unnamed(self):
        errors = validate_conditions({'blocks': ['bad']})

        self.assertEqual(errors, ['Block 1 (unnamed): Block must be an object'])


class TestFormatValue(unittest.TestCase):

    def test_format(self):
        self.assertEqual(format_value(True), 'true')
        self.assertEqual(format_value(2.5), '2.5')
        self.assertEqual(format_value('{{x}}'), '{{x}}')
        self.assertEqual(format_value('x'), '"x"')
        self.assertEqual(format_value([1, 2]), '[1, 2]')
        self.assertEqual(format_value(None), 'null')

    def test_operator_catalogue(self):
        self.assertFalse(OPERATORS['exists']['needs_value'])
        self.assertTrue(OPERATORS['equals']['needs_value'])


if __name__ == '__main__':
    unittest.main()
