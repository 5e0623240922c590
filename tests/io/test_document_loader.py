"""
Testes para DocumentLoader e funções de carregamento
"""

import pytest

from transitionflow.core.models import DocumentLoadError, ValidationError
from transitionflow.io.document_loader import (
    DocumentLoader,
    load_json_file,
    load_prior_variables,
    load_schema,
    load_states,
    load_transitions,
)


class TestLoadJsonFile:

    def test_load(self, write_json):
        path = write_json('doc.json', {'steps': []})

        assert load_json_file(path) == {'steps': []}

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentLoadError, match="Arquivo não encontrado"):
            load_json_file(tmp_path / 'nope.json')

    def test_invalid_json(self, tmp_path):
        path = tmp_path / 'bad.json'
        path.write_text('{not json', encoding='utf-8')

        with pytest.raises(DocumentLoadError, match="JSON inválido"):
            load_json_file(path)


class TestSpecializedLoaders:

    def test_schema_list_or_wrapped(self, write_json):
        assert load_schema(write_json('a.json', ['user'])) == ['user']
        assert load_schema(write_json('b.json', {'fields': [{'key': 'x'}]})) == [{'key': 'x'}]
        assert load_schema(write_json('c.json', {'schema': ['y']})) == ['y']

    def test_schema_invalid_shape(self, write_json):
        with pytest.raises(DocumentLoadError, match="Formato inválido"):
            load_schema(write_json('d.json', {'other': []}))

    def test_prior_variables(self, write_json):
        assert load_prior_variables(write_json('v.json', {'storedVariables': ['t']})) == ['t']

    def test_transitions_filters_non_dicts(self, write_json):
        path = write_json('t.json', {'transitions': [{'from': 'a', 'to': 'b'}, 'bad']})

        assert load_transitions(path) == [{'from': 'a', 'to': 'b'}]

    def test_states(self, write_json):
        assert load_states(write_json('s1.json', {'states': {'a': {}}})) == {'a': {}}
        assert load_states(write_json('s2.json', {'a': {}})) == {'a': {}}
        with pytest.raises(DocumentLoadError):
            load_states(write_json('s3.json', []))


class TestDocumentLoader:

    def test_load_documents(self, write_json, tmp_path):
        write_json('login.json', {'steps': []})
        write_json('checkout/pay.json', {'requires': {'a': 1}})
        (tmp_path / 'empty.json').write_text('  ', encoding='utf-8')
        (tmp_path / 'notes.txt').write_text('ignored', encoding='utf-8')

        documents = DocumentLoader(str(tmp_path)).load_documents()

        assert list(documents) == ['checkout/pay', 'login']
        assert documents['checkout/pay'] == {'requires': {'a': 1}}

    def test_directory_matching_extension_skipped(self, write_json, tmp_path):
        write_json('login.json', {'steps': []})
        (tmp_path / 'archive.json').mkdir()
        write_json('archive.json/old.json', {'steps': [1]})

        documents = DocumentLoader(str(tmp_path)).load_documents()

        assert list(documents) == ['archive.json/old', 'login']

    def test_custom_extension(self, tmp_path):
        (tmp_path / 'flow.transition').write_text('{"steps": []}', encoding='utf-8')

        documents = DocumentLoader(str(tmp_path), extension='.transition').load_documents()

        assert documents == {'flow': {'steps': []}}

    def test_missing_directory(self, tmp_path):
        with pytest.raises(DocumentLoadError, match="Diretório não encontrado"):
            DocumentLoader(str(tmp_path / 'missing')).load_documents()

    def test_not_a_directory(self, write_json):
        path = write_json('file.json', {})

        with pytest.raises(DocumentLoadError, match="não é um diretório"):
            DocumentLoader(str(path)).load_documents()

    def test_no_files(self, tmp_path):
        with pytest.raises(DocumentLoadError, match="Nenhum arquivo"):
            DocumentLoader(str(tmp_path)).load_documents()

    def test_empty_extension(self, tmp_path):
        with pytest.raises(ValidationError):
            DocumentLoader(str(tmp_path), extension=' ').load_documents()
