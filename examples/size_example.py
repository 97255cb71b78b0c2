"""
Size the example deployment from Python.

Loads examples/example_deployment.json into the built-in defaults, sizes
every site with N+1 polling redundancy and prints the per-site table.
"""

from pathlib import Path

from collector_sizing.defaults import default_config
from collector_sizing.deployment import load_deployment_file
from collector_sizing.report import sites_frame, totals_frame
from collector_sizing.sizer import size_deployment
from collector_sizing.state import set_failover


def main() -> None:
    path = Path(__file__).resolve().parent / "example_deployment.json"
    result = load_deployment_file(str(path), default_config())
    config = set_failover(result.config, polling=True)

    sizing = size_deployment(result.sites, config)

    print("=== Sites ===")
    print(sites_frame(sizing).to_string(index=False))
    print("\n=== Collectors required ===")
    print(totals_frame(sizing).to_string(index=False))


if __name__ == "__main__":
    main()
