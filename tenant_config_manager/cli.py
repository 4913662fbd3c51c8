from __future__ import annotations

import argparse
import importlib
import json
from typing import Any

from .registry import FieldRegistry, ModelRegistry
from .settings import StoreSettings
from .store import TenantConfigStore


def _import_registry(spec: str) -> FieldRegistry:
    """``package.module:attr`` → registry, or a ``{code: model}`` mapping."""
    module_name, _, attr = spec.partition(":")
    if not attr:
        raise SystemExit(f"--registry must look like 'module:attribute', got '{spec}'")
    obj = getattr(importlib.import_module(module_name), attr)
    if isinstance(obj, dict):
        return ModelRegistry(obj)
    return obj


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _build_store(args: argparse.Namespace) -> TenantConfigStore:
    overrides = {"config_dir": args.dir} if args.dir else {}
    if args.file_name:
        overrides["file_name"] = args.file_name
    return TenantConfigStore.from_settings(
        _import_registry(args.registry), StoreSettings(**overrides)
    )


def _cmd_show(args: argparse.Namespace) -> None:
    store = _build_store(args)
    document = store.load(args.tenant)
    print(json.dumps(document.snapshot(), indent=4, ensure_ascii=False, default=str))


def _cmd_set(args: argparse.Namespace) -> None:
    store = _build_store(args)
    document = store.load(args.tenant)
    try:
        document.set_value(args.key, _parse_value(args.value))
    except (KeyError, ValueError) as e:
        raise SystemExit(str(e)) from e
    if not store.save(args.tenant, force=True):
        raise SystemExit(f"Could not save config of '{args.tenant}'")


def _cmd_reset(args: argparse.Namespace) -> None:
    store = _build_store(args)
    store.load(args.tenant)
    store.unload(args.tenant)
    if not store.save(args.tenant, force=True):
        raise SystemExit(f"Could not save config of '{args.tenant}'")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Tenant Config Manager CLI")
    parser.add_argument("--dir", help="Config root directory (default: $TENANT_CONFIG_CONFIG_DIR)")
    parser.add_argument("--file-name", help="Config file name (default: config_v2.json)")
    parser.add_argument(
        "--registry",
        required=True,
        help="Setting groups as 'module:attr' (a registry or a {code: model} dict)",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_show = sub.add_parser("show", help="Load and print a tenant's settings")
    p_show.add_argument("tenant")
    p_show.set_defaults(func=_cmd_show)

    p_set = sub.add_parser("set", help="Set one value (group.field) and save")
    p_set.add_argument("tenant")
    p_set.add_argument("key")
    p_set.add_argument("value")
    p_set.set_defaults(func=_cmd_set)

    p_reset = sub.add_parser("reset", help="Reset a tenant to defaults and save")
    p_reset.add_argument("tenant")
    p_reset.set_defaults(func=_cmd_reset)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":  # pragma: no cover - manual use
    main()
