import argparse, logging, os, sys

import config
from demo.scenarios import SCENARIOS


def scenario_log_path(base: str, key: str, many: bool) -> str:
    # one trace file per scenario when several run
    if not many:
        return base
    stem, ext = os.path.splitext(base)
    return f"{stem}_{key}{ext or '.csv'}"


def run_scenario(key: str, log_path=None, duplicate_policy=None):
    fn = SCENARIOS[key]
    return fn(log_path=log_path, duplicate_policy=duplicate_policy)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run the event registry usage scenarios")
    parser.add_argument(
        "--scenario", "-s",
        help=f"scenario key ({'/'.join(SCENARIOS)})",
        default="1",
    )
    parser.add_argument(
        "--all", "-a",
        action="store_true",
        help="run every scenario in order",
    )
    parser.add_argument(
        "--log",
        help="write a CSV dispatch trace to this path",
        default=config.DISPATCH_LOG_PATH,
    )
    parser.add_argument(
        "--policy",
        choices=["accumulate", "replace"],
        default=config.DUPLICATE_POLICY.lower(),
        help="duplicate-key policy for subscribe",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.LOG_LEVEL,
        format=config.LOG_FORMAT,
    )
    log = logging.getLogger("run")

    keys = list(SCENARIOS) if args.all else [args.scenario]
    for key in keys:
        if key not in SCENARIOS:
            log.error("unknown scenario %r (choose from %s)", key, ", ".join(SCENARIOS))
            return 2

    for key in keys:
        log_path = scenario_log_path(args.log, key, len(keys) > 1) if args.log else None
        lines = run_scenario(key, log_path=log_path, duplicate_policy=args.policy)
        print(f"--- scenario {key}: {SCENARIOS[key].__name__}")
        for line in lines:
            print(line)
        if log_path:
            log.info("dispatch trace written to %s", log_path)

    return 0


if __name__ == "__main__":
    sys.exit(main())
