'''
To Run:
python -m receipt_splitter.cli receipt.csv --tax 0.36
'''
import click
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from receipt_splitter import config, draft_editor, exporter, importers

# Set up logging
logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

def _parse_tax(ctx, param, value):
    if value is None:
        return None
    try:
        tax = Decimal(value)
    except InvalidOperation:
        raise click.BadParameter(f'{value!r} is not an amount')
    if not tax.is_finite():
        raise click.BadParameter(f'{value!r} is not an amount')
    return tax

@click.command()
@click.option('--people', 'people_path', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help='YAML people bank (defaults to the bundled one)')
@click.option('--tax', callback=_parse_tax, default=None, help='Order-level tax, e.g. 0.36')
@click.option('--currency', default=None, help='Currency code for CSV receipts')
@click.option('--json-out', type=click.Path(dir_okay=False, path_type=Path), help='Write draft + result as JSON')
@click.option('--csv-out', type=click.Path(dir_okay=False, path_type=Path), help='Write per-person breakdown CSV')
@click.option('--sample-csv', type=click.Path(dir_okay=False, path_type=Path),
              help='Write a sample receipt CSV and exit')
@click.argument('receipt', required=False, type=click.Path(exists=True, dir_okay=False, path_type=Path))
def main(people_path, tax, currency, json_out, csv_out, sample_csv, receipt):
    """
    Split a receipt (CSV or JSON) between the people who shared it.

    This command will:
    1. Load the people bank and import the receipt
    2. Apply --tax / --currency overrides
    3. Validate and compute the split, then print it
    4. Export JSON / CSV when asked
    """
    if sample_csv:
        exporter.write_sample_csv(sample_csv)
        click.echo(f'✔ Sample receipt written to {sample_csv}')
        return

    if receipt is None:
        raise click.UsageError('Missing argument RECEIPT.')

    people_bank = config.load_people_bank(people_path)
    logger.info(f"Loaded {len(people_bank)} people from the people bank")

    try:
        draft = importers.load_draft(receipt, people_bank,
                                     currency or config.default_currency(people_path))
    except importers.DraftImportError as e:
        raise click.ClickException(f'Error importing {receipt.name}: {e}')

    if tax is not None:
        draft = draft_editor.set_tax(draft, tax)
    if currency:
        draft = draft_editor.update_receipt_meta(draft, currency=currency)

    recalc = draft_editor.recalculate(draft)

    for warning in recalc.warnings:
        click.echo(f'⚠️  {warning}')

    click.echo("\n" + exporter.format_breakdown(recalc.draft, recalc.result))

    if json_out:
        exporter.export_json(json_out, recalc.draft, recalc.result)
        click.echo(f'✔ JSON written to {json_out}')
    if csv_out:
        exporter.write_breakdown_csv(csv_out, recalc.result, recalc.draft.people)
        click.echo(f'✔ Breakdown CSV written to {csv_out}')

if __name__ == '__main__':
    main()
