#!/usr/bin/env python3
"""Command-line entry point for the auto-instrumentation injector.

Reads a pod manifest, injects one runtime's auto-instrumentation into the
selected containers and writes the mutated pod to stdout. Env var
conflicts do not fail the command: the pod is written unchanged for the
affected container and the conflict is logged.
"""
import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

# Load .env file before any other imports that use os.environ
from dotenv import load_dotenv

load_dotenv()

from autoinject.core.config import AppConfig, InstrumentationConfig
from autoinject.core.exceptions import InjectorError, ManifestError
from autoinject.core.models import Pod
from autoinject.core.runtimes import list_runtimes
from autoinject.services.injector import InjectionOrchestrator, InjectionResult
from autoinject.utils.manifest import dump_manifest, load_pod


@dataclass
class CliArgs:
    """Parsed command-line arguments."""
    manifest: str | None
    runtime: str | None
    containers: list[str] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)
    config: Path | None = None
    output: str = "yaml"
    log_level: str | None = None
    list_runtimes: bool = False


def parse_arguments(argv: list[str] | None = None) -> CliArgs:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Inject auto-instrumentation into a pod manifest"
    )
    parser.add_argument(
        "manifest",
        nargs="?",
        help="Pod manifest (YAML or JSON), '-' for stdin"
    )
    parser.add_argument(
        "--runtime", "-r",
        help="Runtime to instrument (dotnet, java, nodejs, python, ...)"
    )
    parser.add_argument(
        "--container", "-c",
        action="append",
        default=[],
        dest="containers",
        help="Target container name (repeatable)"
    )
    parser.add_argument(
        "--index", "-i",
        action="append",
        type=int,
        default=[],
        dest="indices",
        help="Target container index (repeatable)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Instrumentation config file (default: $INSTRUMENTATION_CONFIG)"
    )
    parser.add_argument(
        "--output", "-o",
        default="yaml",
        choices=["yaml", "json"],
        help="Output format"
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: $LOG_LEVEL or INFO)"
    )
    parser.add_argument(
        "--list-runtimes",
        action="store_true",
        help="List available runtimes and exit"
    )
    args = parser.parse_args(argv)

    return CliArgs(
        manifest=args.manifest,
        runtime=args.runtime,
        containers=args.containers,
        indices=args.indices,
        config=args.config,
        output=args.output,
        log_level=args.log_level,
        list_runtimes=args.list_runtimes,
    )


def print_runtimes(config: InstrumentationConfig | None = None) -> int:
    """Print available runtimes and exit."""
    names = set(list_runtimes())
    if config is not None:
        names.update(config.profiles)

    print("Available runtimes:")
    for name in sorted(names):
        configured = config is not None and name in config.runtimes
        print(f"  - {name}{' (configured)' if configured else ''}")
    return 0


def list_configured_runtimes(args: CliArgs, app_config: AppConfig) -> int:
    config_path = args.config or app_config.instrumentation_path
    instrumentation = None
    if config_path.exists():
        instrumentation = InstrumentationConfig.from_yaml(config_path)
    return print_runtimes(instrumentation)


def select_indices(pod: Pod, args: CliArgs) -> list[int]:
    """Resolve --container / --index options, defaulting to the first container."""
    indices = list(args.indices)
    for name in args.containers:
        try:
            indices.append(pod.container_index(name))
        except KeyError as e:
            raise ManifestError(str(e.args[0]), source=args.manifest) from e
    if not indices:
        indices = [0]

    count = len(pod.spec.containers)
    for index in indices:
        if not 0 <= index < count:
            raise ManifestError(
                f"container index {index} out of range (pod has {count})",
                source=args.manifest,
            )
    return list(dict.fromkeys(indices))


def report(results: list[InjectionResult], runtime: str, logger: logging.Logger) -> None:
    for result in results:
        fields = {"runtime": runtime, "container": result.container}
        if result.injected:
            logger.info("Injected auto-instrumentation", extra=fields)
        else:
            logger.warning(
                f"Auto-instrumentation skipped: {result.conflict.env_var} is set via valueFrom",
                extra={**fields, "env_var": result.conflict.env_var},
            )


def run_injection(args: CliArgs, app_config: AppConfig, logger: logging.Logger) -> int:
    """Run the injection and return exit code."""
    config_path = args.config or app_config.instrumentation_path
    instrumentation = InstrumentationConfig.from_yaml(config_path)
    logger.debug(f"Loaded instrumentation config from {config_path}")

    profile = instrumentation.profile_for(args.runtime)
    spec = instrumentation.get(args.runtime)

    pod = load_pod(args.manifest)
    indices = select_indices(pod, args)

    orchestrator = InjectionOrchestrator(profile)
    results = orchestrator.run_many(pod, spec, indices)
    report(results, args.runtime, logger)

    mutated = results[-1].pod
    sys.stdout.write(dump_manifest(mutated.to_dict(), args.output))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)
    try:
        app_config = AppConfig.from_env()
    except InjectorError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    if args.log_level:
        app_config.logging.min_level = args.log_level

    app_config.logging.configure()
    logger = logging.getLogger("autoinject")

    if not args.list_runtimes and (not args.manifest or not args.runtime):
        print("Error: manifest and --runtime are required", file=sys.stderr)
        return 1

    try:
        if args.list_runtimes:
            return list_configured_runtimes(args, app_config)
        return run_injection(args, app_config, logger)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except InjectorError as e:
        logger.error(e.message)
        return 1


if __name__ == "__main__":
    sys.exit(main())
