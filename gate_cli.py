#!/usr/bin/env python3
"""
ORACLE GATE - Condition Gate CLI

Menu-driven CLI for a single condition gate, plus non-interactive modes.
This is a PURE SHELL - it only:
- Gets user input
- Calls tool functions
- Prints results

NO gate logic lives here. All operations go through oracle_gate/tools/*.

Non-interactive modes:
  python gate_cli.py simulate --owner alice --threshold 1000 --predicted 1200 --prices 1100,1500
  python gate_cli.py scenario scenarios/prediction_cycle.yml
  python gate_cli.py config
"""

import argparse
import sys

from rich.panel import Panel

from oracle_gate.config.config import get_config
from oracle_gate.core import (
    ConditionGate,
    FixedOracle,
    LogAdapter,
    RecordingAction,
    SequenceOracle,
    build_gate_from_config,
)
from oracle_gate.scenario import load_scenario, run_scenario
from oracle_gate.tools import (
    evaluate_condition_tool,
    get_gate_status_tool,
    list_events_tool,
    set_predicted_value_tool,
    trigger_action_tool,
)
from oracle_gate.utils.logger import setup_logger
from oracle_gate.cli import (
    console,
    BACK,
    get_choice,
    get_input,
    get_int_input,
    print_error_below_menu,
    print_result,
    build_steps_table,
)


def parse_prices(raw: str) -> list[int]:
    """Parse a comma-separated list of integer prices."""
    prices = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            prices.append(int(part))
        except ValueError:
            raise argparse.ArgumentTypeError(f"price '{part}' is not an integer")
    if not prices:
        raise argparse.ArgumentTypeError("at least one price is required")
    return prices


def parse_cli_args(argv=None) -> argparse.Namespace:
    """
    Parse command-line arguments for gate_cli.

    Supports:
      (no command)  Interactive menu on a gate built from configuration
      simulate      Evaluate a gate against a list of oracle prices
      scenario      Run a YAML scenario file
      config        Show loaded configuration
    """
    parser = argparse.ArgumentParser(
        description="ORACLE GATE - Condition Gate CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python gate_cli.py                                   # Interactive mode (default)
  python gate_cli.py simulate --owner alice --threshold 1000 --predicted 1200 --prices 1100,1500
  python gate_cli.py simulate --owner alice --threshold 1000 --prices 900,1200,1300 --trigger
  python gate_cli.py scenario scenarios/prediction_cycle.yml
  python gate_cli.py config
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    sim_parser = subparsers.add_parser("simulate", help="Evaluate a gate against a price list")
    sim_parser.add_argument("--owner", required=True, help="Owner identity")
    sim_parser.add_argument("--threshold", type=int, required=True, help="Trigger threshold (non-negative)")
    sim_parser.add_argument("--predicted", type=int, default=None, help="Predicted value set by the owner")
    sim_parser.add_argument("--prices", type=parse_prices, required=True, help="Comma-separated oracle prices")
    sim_parser.add_argument("--caller", default="keeper", help="Identity running evaluations and triggers")
    sim_parser.add_argument("--trigger", action="store_true", default=False,
                            help="Trigger the action whenever the gate is armed")

    scenario_parser = subparsers.add_parser("scenario", help="Run a YAML scenario file")
    scenario_parser.add_argument("path", help="Path to the scenario YAML")

    subparsers.add_parser("config", help="Show loaded configuration")

    return parser.parse_args(argv)


# ==============================================================================
# Non-interactive handlers
# ==============================================================================

def handle_simulate(args: argparse.Namespace) -> int:
    """Run a price-list simulation. Returns an exit code."""
    action = RecordingAction()
    try:
        gate = ConditionGate(
            owner=args.owner,
            oracle=SequenceOracle(args.prices, name="cli:prices"),
            trigger_threshold=args.threshold,
            gate_id="simulation",
            action=action,
        )
    except ValueError as e:
        print_error_below_menu(str(e), "Could not create gate")
        return 1

    rows = []
    if args.predicted is not None:
        result = set_predicted_value_tool(gate, args.owner, args.predicted)
        rows.append((len(rows) + 1, "set_predicted", args.owner, result, f"value={args.predicted}"))
        if not result.success:
            console.print(build_steps_table("Simulation", rows))
            return 1

    for price in args.prices:
        result = evaluate_condition_tool(gate, args.caller)
        rows.append((len(rows) + 1, "evaluate", args.caller, result, f"price={price}"))
        if not result.success:
            console.print(build_steps_table("Simulation", rows))
            return 1
        if args.trigger and gate.condition_met:
            result = trigger_action_tool(gate, args.caller)
            rows.append((len(rows) + 1, "trigger", args.caller, result, ""))

    console.print(build_steps_table("Simulation", rows))
    console.print(
        f"[bold]Events:[/] {gate.events.last_seq}  "
        f"[bold]Actions fired:[/] {action.count}  "
        f"[bold]Final state:[/] {gate.state.value}"
    )
    return 0


def handle_scenario(args: argparse.Namespace) -> int:
    """Run a scenario file. Returns 0 when every step matched its expectation."""
    try:
        scenario = load_scenario(args.path)
        run = run_scenario(scenario)
    except (FileNotFoundError, ValueError) as e:
        print_error_below_menu(str(e), f"Scenario: {args.path}")
        return 1

    rows = []
    for outcome in run.outcomes:
        note = f"expect={outcome.step.expect}"
        if not outcome.matched:
            note = f"[red]MISMATCH {note}[/]"
        rows.append((outcome.index, outcome.step.op, outcome.step.caller, outcome.result, note))

    console.print(build_steps_table(f"Scenario: {scenario.name}", rows))
    if run.passed:
        console.print(f"[bold green]✓ All {len(run.outcomes)} steps behaved as expected[/]")
        return 0
    console.print(f"[bold red]✗ {len(run.mismatches)} step(s) did not match expectations[/]")
    return 1


def handle_config(args: argparse.Namespace) -> int:
    """Print configuration and validation status."""
    config = get_config()
    console.print(config.summary())
    is_valid, messages = config.validate()
    if is_valid:
        console.print("[green]✓ Configuration valid[/]")
        return 0
    for msg in messages:
        console.print(f"[red]{msg}[/]")
    return 1


# ==============================================================================
# Interactive mode
# ==============================================================================

class GateCLI:
    """Interactive menu around one gate and a manually published oracle value."""

    def __init__(self, gate: ConditionGate, oracle: FixedOracle):
        self.gate = gate
        self.oracle = oracle
        self._last_seq = 0

    def main_menu(self):
        """Display the main menu until the user exits."""
        while True:
            snap = self.gate.snapshot()
            console.print(Panel(
                f"Gate [bold]{snap.gate_id}[/] | owner={snap.owner} | "
                f"predicted={snap.predicted_value} | threshold={snap.trigger_threshold} | "
                f"state=[bold]{snap.state.value.upper()}[/]\n\n"
                "1. Set predicted value (owner)\n"
                "2. Publish oracle value\n"
                "3. Evaluate condition\n"
                "4. Trigger action\n"
                "5. Status\n"
                "6. New events\n"
                "0. Exit",
                title="[bold]ORACLE GATE[/]",
                border_style="cyan",
            ))

            choice = get_choice(range(0, 7))
            if choice is BACK or choice == 0:
                console.print("\n[yellow]Goodbye![/]")
                return

            if choice == 1:
                caller = get_input("Caller identity", self.gate.owner)
                if caller is BACK:
                    continue
                value = get_int_input("Predicted value")
                if value is BACK:
                    continue
                print_result(set_predicted_value_tool(self.gate, caller, value))
            elif choice == 2:
                value = get_int_input("Oracle value")
                if value is BACK:
                    continue
                self.oracle.set_value(value)
                console.print(f"[green]✓ Oracle now reports {value}[/]")
            elif choice == 3:
                caller = get_input("Caller identity", "keeper")
                if caller is BACK:
                    continue
                print_result(evaluate_condition_tool(self.gate, caller))
            elif choice == 4:
                caller = get_input("Caller identity", "keeper")
                if caller is BACK:
                    continue
                print_result(trigger_action_tool(self.gate, caller))
            elif choice == 5:
                print_result(get_gate_status_tool(self.gate))
            elif choice == 6:
                result = list_events_tool(self.gate, self._last_seq)
                self._last_seq = self.gate.events.last_seq
                print_result(result)


def run_interactive() -> int:
    """Build a gate from configuration and open the menu."""
    config = get_config()
    is_valid, messages = config.validate()
    if not is_valid:
        print_error_below_menu("\n".join(messages), "Set GATE_OWNER and GATE_TRIGGER_THRESHOLD in .env")
        return 1

    oracle = FixedOracle(name="manual")
    gate = build_gate_from_config(oracle, config, action=RecordingAction())
    gate.events.subscribe(LogAdapter())
    GateCLI(gate, oracle).main_menu()
    return 0


def main(argv=None) -> int:
    """Main entry point."""
    # Parse CLI arguments FIRST (before any config or logging)
    args = parse_cli_args(argv)

    config = get_config()
    setup_logger(config.log.log_dir, config.log.level)

    if args.command == "simulate":
        return handle_simulate(args)
    if args.command == "scenario":
        return handle_scenario(args)
    if args.command == "config":
        return handle_config(args)
    return run_interactive()


if __name__ == "__main__":
    sys.exit(main())
