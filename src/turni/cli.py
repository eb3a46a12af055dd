from __future__ import annotations

import argparse
import json
import sys

from turni.io.loader import load_snapshot
from turni.io.results_export import result_to_json
from turni.solver.engine import generate_week_shifts
from turni.solver.gatekeeper import TipoRichiestaSlot, check_slot_availability
from turni.solver.riposi import TipoQuota, assign_riposi_automatici
from turni.utils.logging_setup import setup_logging
from turni.utils.structured_logging import configure_structlog

_LEVELS = {0: "WARNING", 1: "INFO", 2: "DEBUG"}


def _cmd_generate(args: argparse.Namespace) -> int:
    snapshot = load_snapshot(args.snapshot)
    res = generate_week_shifts(snapshot)

    if args.json_out:
        print(result_to_json(res))
    else:
        print("Riepilogo:")
        for k, v in res.summary().items():
            print(f" - {k}: {v}")
        for t in res.turni:
            nomi = ", ".join(c.nome for c in t.selezionati) or "-"
            print(f"{t.data.isoformat()} {t.nucleo_nome:<15} {t.ora_inizio}-{t.ora_fine} "
                  f"[{t.copertura_status.value}] {nomi}")
    return 0


def _cmd_riposi(args: argparse.Namespace) -> int:
    snapshot = load_snapshot(args.snapshot)
    settimana = args.settimana or snapshot.week_start
    res = assign_riposi_automatici(args.collaboratore, args.tipo, args.quantita, settimana, snapshot)

    if args.json_out:
        print(result_to_json(res))
    else:
        print(res.reasoning)
    return 0 if res.success else 1


def _cmd_check_slot(args: argparse.Namespace) -> int:
    snapshot = load_snapshot(args.snapshot)
    res = check_slot_availability(args.nucleo, args.data, args.collaboratore, args.tipo, snapshot)

    if args.json_out:
        print(json.dumps(res.to_dict(), ensure_ascii=False, indent=2))
    else:
        print("Approvabile" if res.disponibile else f"Bloccata: {res.motivo}")
    return 0 if res.disponibile else 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="turni", description="Motore turni: generazione, riposi, verifica copertura")
    p.add_argument("-v", "--verbose", action="count", default=0)
    p.add_argument("--log-file", default=None, help="File di log (rotazione automatica)")
    sub = p.add_subparsers(dest="command", required=True)

    g = sub.add_parser("generate", help="Genera i turni della settimana")
    g.add_argument("snapshot", help="Snapshot JSON del contesto")
    g.add_argument("--json", dest="json_out", action="store_true", help="Output JSON completo")
    g.set_defaults(func=_cmd_generate)

    r = sub.add_parser("riposi", help="Assegna i riposi di un collaboratore")
    r.add_argument("snapshot")
    r.add_argument("--collaboratore", required=True)
    r.add_argument("--tipo", choices=[t.value for t in TipoQuota], default=TipoQuota.GIORNI_INTERI.value)
    r.add_argument("--quantita", type=int, required=True)
    r.add_argument("--settimana", default=None, help="Lunedì della settimana (default: weekStart dello snapshot)")
    r.add_argument("--json", dest="json_out", action="store_true")
    r.set_defaults(func=_cmd_riposi)

    c = sub.add_parser("check-slot", help="Verifica se una richiesta lascia il nucleo scoperto")
    c.add_argument("snapshot")
    c.add_argument("--nucleo", required=True)
    c.add_argument("--data", required=True, help="YYYY-MM-DD")
    c.add_argument("--collaboratore", required=True)
    c.add_argument("--tipo", choices=[t.value for t in TipoRichiestaSlot], default=TipoRichiestaSlot.RIPOSO.value)
    c.add_argument("--json", dest="json_out", action="store_true")
    c.set_defaults(func=_cmd_check_slot)
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(
        level="DEBUG" if args.log_file else "INFO",
        log_file=args.log_file,
        console_level=_LEVELS.get(args.verbose, "DEBUG"),
    )
    configure_structlog(json_output=False)

    try:
        return args.func(args)
    except (ValueError, KeyError, OSError) as exc:
        print(f"Errore: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
