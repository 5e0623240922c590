"""
Fixtures compartilhadas para testes
"""

import json

import pytest

from transitionflow.config import Config


# ==================== Document Fixtures ====================

@pytest.fixture
def role_check_document():
    """Documento com uma condição top-level e um step com storeAs"""
    return {
        'conditions': {
            'blocks': [{
                'enabled': True,
                'type': 'condition-check',
                'data': {
                    'checks': [{
                        'field': 'ctx.data.user.role',
                        'operator': 'equals',
                        'value': 'admin',
                        'enabled': True
                    }]
                }
            }]
        },
        'steps': [{'storeAs': 'sessionToken', 'method': 'getToken'}]
    }


@pytest.fixture
def booking_document():
    """Documento completo: condições, imports, steps e actionDetails"""
    return {
        'event': 'SUBMIT_BOOKING',
        'conditions': {
            'mode': 'all',
            'blocks': [
                {
                    'id': 'b1',
                    'type': 'condition-check',
                    'label': 'Guards',
                    'enabled': True,
                    'data': {
                        'checks': [
                            {'field': 'agency.type', 'operator': 'equals', 'value': 'retail'},
                            {'field': 'lang', 'operator': 'exists'},
                            {'field': 'skipped', 'operator': 'exists', 'enabled': False},
                        ]
                    }
                },
                {
                    'id': 'b2',
                    'type': 'custom-code',
                    'enabled': True,
                    'code': 'return ctx.data.booking.total > 0 && testData.payment.method;'
                },
                {
                    'id': 'b3',
                    'type': 'condition-check',
                    'enabled': False,
                    'data': {'checks': [{'field': 'disabled.field', 'operator': 'exists'}]}
                },
            ]
        },
        'imports': [
            {'className': 'BookingPage', 'constructor': 'new BookingPage(ctx.data.lang)',
             'path': 'pages/booking.js'},
        ],
        'steps': [
            {
                'type': 'call',
                'method': 'fillPassenger',
                'args': ['ctx.data.passengers.adults[0].name', '{{bookingRef}}'],
            },
            {
                'type': 'call',
                'method': 'getPassengerCount',
                'args': 'ctx.data.passengers.adults[1].name',
                'storeAs': {'key': 'passengerCount', 'persist': False, 'global': True},
            },
            {
                'type': 'custom',
                'code': 'await page.fill(ctx.data.agency.code);',
                'conditions': {
                    'blocks': [{
                        'type': 'condition-check',
                        'enabled': True,
                        'data': {'checks': [{'field': 'flags.express', 'operator': 'truthy'}]}
                    }]
                }
            },
        ],
        'actionDetails': {
            'steps': [
                {'type': 'call', 'selector': '#ref-{{ctx.data.booking.ref}}', 'storeAs': 'confirmation'},
            ]
        }
    }


@pytest.fixture
def linear_transitions():
    """Transições lineares start -> login -> dashboard"""
    return [
        {
            'from': 'start', 'to': 'login', 'event': 'OPEN',
            'actionDetails': {
                'steps': [{'type': 'call', 'method': 'open', 'args': ['ctx.data.baseUrl']}]
            }
        },
        {
            'from': 'login', 'to': 'dashboard', 'event': 'LOGIN',
            'actionDetails': {
                'steps': [
                    {'type': 'call', 'method': 'login',
                     'args': ['ctx.data.user.email', 'ctx.data.user.password']},
                    {'type': 'getText', 'method': 'readToken', 'storeAs': 'authToken'},
                ]
            }
        },
        {
            'from': 'dashboard', 'to': 'profile', 'event': 'OPEN_PROFILE',
            'actionDetails': {
                'steps': [{'type': 'call', 'method': 'open', 'args': ['{{authToken}}']}]
            }
        },
    ]


# ==================== File Fixtures ====================

@pytest.fixture
def write_json(tmp_path):
    """Escreve um JSON em tmp_path e retorna o caminho"""
    def _write(name, data):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding='utf-8')
        return path
    return _write


# ==================== Config Fixtures ====================

@pytest.fixture(autouse=True)
def reset_config():
    """Garante singleton de configuração limpo entre testes"""
    Config.reset_instance()
    yield
    Config.reset_instance()
