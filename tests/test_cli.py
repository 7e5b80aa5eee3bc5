"""
CLI tests, run through click's test runner.
"""
import json

import pytest
from click.testing import CliRunner

from receipt_splitter.cli import main


PEOPLE_YAML = """currency: USD
people:
  - id: kevin
    name: Kevin
  - id: alice
    name: Alice
  - id: bob
    name: Bob
"""

RECEIPT_CSV = """name,price,payers
Oranges,3.00,"Kevin, Alice, Bob"
Apple,1.50,Kevin
"""


@pytest.fixture()
def files(tmp_path):
    people = tmp_path / 'people.yaml'
    people.write_text(PEOPLE_YAML)
    receipt = tmp_path / 'receipt.csv'
    receipt.write_text(RECEIPT_CSV)
    return tmp_path, people, receipt


def test_split_csv_receipt(files):
    tmp_path, people, receipt = files
    json_out = tmp_path / 'out.json'
    csv_out = tmp_path / 'out.csv'

    result = CliRunner().invoke(main, [
        str(receipt), '--people', str(people), '--tax', '0.36',
        '--json-out', str(json_out), '--csv-out', str(csv_out),
    ])

    assert result.exit_code == 0, result.output
    assert 'Kevin: Subtotal $2.50, Tax $0.20, Total $2.70' in result.output
    assert 'Alice: Subtotal $1.00, Tax $0.08, Total $1.08' in result.output
    assert 'Receipt Total: $4.86' in result.output
    assert '⚠️' not in result.output

    exported = json.loads(json_out.read_text())
    assert exported['taxTotal'] == '0.36'
    assert exported['calculationResult']['rounding']['residualApplied'] == []
    assert csv_out.exists()


def test_warnings_are_printed(files):
    tmp_path, people, receipt = files
    receipt.write_text(RECEIPT_CSV + 'Napkins,1.00,\n')

    result = CliRunner().invoke(main, [str(receipt), '--people', str(people)])

    assert result.exit_code == 0, result.output
    assert '⚠️  item "Napkins" has no payers assigned' in result.output


def test_import_error_exits_nonzero(files):
    tmp_path, people, _ = files
    bad = tmp_path / 'receipt.txt'
    bad.write_text('nope')

    result = CliRunner().invoke(main, [str(bad), '--people', str(people)])

    assert result.exit_code == 1
    assert 'Error importing receipt.txt' in result.output


def test_bad_tax_is_rejected(files):
    _, people, receipt = files
    result = CliRunner().invoke(main, [str(receipt), '--people', str(people), '--tax', 'lots'])
    assert result.exit_code == 2


def test_missing_receipt_is_usage_error():
    result = CliRunner().invoke(main, [])
    assert result.exit_code == 2


def test_sample_csv(tmp_path):
    path = tmp_path / 'sample.csv'
    result = CliRunner().invoke(main, ['--sample-csv', str(path)])

    assert result.exit_code == 0
    assert path.read_text().startswith('name,price,category')
