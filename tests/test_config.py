"""
People bank config tests.
"""
import pytest

from receipt_splitter import config
from receipt_splitter.datatypes import Person


def test_bundled_people_bank():
    people = config.load_people_bank()
    assert Person('kevin', 'Kevin', '@kevin') in people
    assert config.default_currency() == 'USD'


def test_people_bank_from_path(tmp_path):
    path = tmp_path / 'people.yaml'
    path.write_text(
        "currency: EUR\n"
        "people:\n"
        "  - id: 7\n"
        "  - id: ana\n"
        "    name: Ana\n"
        "    handle: '@ana'\n"
    )

    assert config.load_people_bank(path) == [Person('7', '7'), Person('ana', 'Ana', '@ana')]
    assert config.default_currency(path) == 'EUR'


def test_empty_people_bank(tmp_path):
    path = tmp_path / 'people.yaml'
    path.write_text('')
    assert config.load_people_bank(path) == []
    assert config.default_currency(path) == 'USD'


def test_missing_people_bank(tmp_path):
    with pytest.raises(FileNotFoundError):
        config.load_people_bank(tmp_path / 'nope.yaml')
