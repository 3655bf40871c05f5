# studioquote/cli/__main__.py
import sys, json
from pathlib import Path

from pydantic import ValidationError

from studioquote.server.schemas.quotation import QuotationData
from studioquote.server.settings.config import settings
from studioquote.services.masters import MasterRegistry
from studioquote.services.quote_document import (
    build_context_from_quotation,
    paid_label_for,
    render_quotation_html,
)
from studioquote.totals_calculator import PricingConfig, compute_totals, sync_base_amount

USAGE = """Usage:
  python -m studioquote.cli render <quotation.json> [template_path] [--out=out.html] [--tax] [--milestones]
  python -m studioquote.cli totals <quotation.json> [--tax] [--milestones]

Flags override the configured pricing mode:
  --tax         add tax (quotation tax_rate, else DEFAULT_TAX_RATE)
  --milestones  total paid = sum of paid milestones instead of the advance

Examples:
  python -m studioquote.cli totals examples/wedding.json
  python -m studioquote.cli render examples/wedding.json --out=proposal.html
"""

def _load_quotation(p: str) -> QuotationData:
    try:
        raw = json.loads(Path(p).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        print(f"Error reading JSON '{p}': {e}", file=sys.stderr)
        sys.exit(2)
    # Accept both a bare quotation and a saved record {"data": {...}}
    if isinstance(raw, dict) and isinstance(raw.get("data"), dict):
        raw = raw["data"]
    try:
        data = QuotationData.model_validate(raw)
    except ValidationError as e:
        print(f"Invalid quotation in '{p}':\n{e}", file=sys.stderr)
        sys.exit(2)
    sync_base_amount(data)
    return data

def _pricing_config(flags) -> PricingConfig:
    config = PricingConfig.from_settings(settings)
    if "--tax" in flags:
        config.apply_tax = True
    if "--milestones" in flags:
        config.payment_tracking = "milestones"
    return config

def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    if len(argv) < 2:
        print(USAGE, file=sys.stderr); sys.exit(1)

    cmd = argv[0].lower()
    quotation_path = argv[1]

    template_path = None
    out_path = None
    flags = set()

    # optional args, any order
    for arg in argv[2:]:
        if arg.startswith("--out="):
            out_path = arg.split("=", 1)[1]
        elif arg.startswith("--"):
            flags.add(arg)
        elif template_path is None:
            template_path = arg  # first non-flag arg after the quotation

    data = _load_quotation(quotation_path)
    config = _pricing_config(flags)
    totals = compute_totals(data, config)

    if cmd == "totals":
        out = {"baseAmount": data.financials.base_amount}
        out.update(totals.model_dump(by_alias=True))
        print(json.dumps(out, ensure_ascii=False, indent=2))
        return

    if cmd == "render":
        ctx = build_context_from_quotation(
            data,
            totals,
            skill_names=MasterRegistry.from_defaults().skill_names(),
            studio_name=settings.studio_name,
            paid_label=paid_label_for(config),
        )
        try:
            html = render_quotation_html(ctx, Path(template_path) if template_path else None)
        except OSError as e:
            print(f"Error reading template '{template_path}': {e}", file=sys.stderr)
            sys.exit(2)
        if out_path:
            Path(out_path).write_text(html, encoding="utf-8")
        else:
            sys.stdout.write(html)
        return

    print(USAGE, file=sys.stderr); sys.exit(1)

if __name__ == "__main__":
    main()
