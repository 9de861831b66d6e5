from __future__ import annotations

import asyncio

import httpx

from ideaforge.cli import base_parser
from ideaforge.core.config.loader import load_app_config
from ideaforge.core.orchestrator.routing import build_routing_policy
from ideaforge.core.providers.health import check_configured_providers
from ideaforge.core.providers.registry import build_adapters


def main() -> int:
    parser = base_parser("ideaforge-diag", "IdeaForge diagnostics CLI")
    parser.add_argument("--validate-config", action="store_true")
    parser.add_argument("--check-providers", action="store_true")
    parser.add_argument("--routing", action="store_true", help="Print the effective routing policy")
    parser.add_argument("--skip-provider-tests", action="store_true")
    args = parser.parse_args()

    try:
        cfg = load_app_config(instance_path=args.config)
    except Exception as exc:  # noqa: BLE001
        print(f"config-invalid error={exc}")
        return 1

    did_work = False

    if args.validate_config:
        did_work = True
        print(f"config-valid instance={cfg.instance.name} env={cfg.environment} preferred={cfg.providers.preferred or '-'}")

    if args.check_providers:
        did_work = True
        print("provider-checks:")
        for name, result in check_configured_providers(cfg, skip_tests=args.skip_provider_tests).items():
            latency = f" latency_ms={result.latency_ms}" if result.latency_ms is not None else ""
            error = f" error={result.error}" if result.error else ""
            print(f"- {name}: enabled={result.enabled} ok={result.ok}{latency}{error}")

    if args.routing:
        did_work = True
        # Adapters are only inspected for eligibility here; no request is sent.
        client = httpx.AsyncClient()
        policy = build_routing_policy(cfg, build_adapters(cfg, client))
        asyncio.run(client.aclose())
        print("routing-policy:")
        for task_kind, order in policy.as_dict().items():
            print(f"- {task_kind}: {' > '.join(order) if order else '(no eligible backend)'}")

    if not did_work:
        parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
