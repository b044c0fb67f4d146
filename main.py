"""
Main entry point for the Case Interview Simulator.
Provides a CLI interface for running interviews.
"""
import sys

from case_loader import get_available_cases, load_case
from config import configure_logging
from errors import CaseInterviewError, GradingError, MissingCredentialError
from graph import InterviewRunner
from interview_factory import create_case_interview, create_catalog_interview, create_generated_interview
from state import CaseStyle, FeedbackReport


def print_separator():
    print("=" * 60)


def print_debug_info(runner: InterviewRunner):
    """Print debug information (would be hidden in production)."""
    state = runner.get_state()
    if state is None:
        return
    phase, completion = runner.get_progress()

    print(f"[DEBUG] Phase: {phase.value}, Progress: {completion}%, Math: {state.math_status.value}")
    print(f"[DEBUG] Thinking: {state.interviewer_thought[:100]}...")
    if runner.get_messages()[-1].degraded:
        print("[DEBUG] Last turn was degraded (model unavailable)")
    print()


def print_report(report: FeedbackReport):
    print("\nScores:")
    print("-" * 40)
    for name, score in report.scores.model_dump().items():
        print(f"  {name.capitalize():<15} {score}/10")

    print("\nStrengths:")
    for item in report.qualitative_feedback.strengths:
        print(f"  + {item}")

    print("\nAreas for Improvement:")
    for item in report.qualitative_feedback.areas_for_improvement:
        print(f"  - {item}")

    print("\nYour Recommendation:")
    print(f"  {report.solution_comparison.user_recommendation_summary}")
    print("\nExpected Answer:")
    print(f"  {report.solution_comparison.actual_ground_truth_summary}")
    print()


def select_case_interactively() -> str:
    """Let user select a case to run."""
    cases = get_available_cases()

    if not cases:
        print("No cases found in the cases/ directory.")
        sys.exit(1)

    print("\nAvailable Cases:")
    print("-" * 40)
    for i, case_id in enumerate(cases, 1):
        print(f"  {i}. {case_id}")
    print()

    while True:
        try:
            choice = input("Select a case (enter number): ").strip()
            idx = int(choice) - 1
            if 0 <= idx < len(cases):
                return cases[idx]
            print("Invalid selection. Try again.")
        except ValueError:
            print("Please enter a number.")
        except KeyboardInterrupt:
            print("\nGoodbye!")
            sys.exit(0)


def run_interview(runner: InterviewRunner, debug: bool = True):
    """Run an interactive interview session."""
    case = runner.session.case

    print_separator()
    print("CASE INTERVIEW SIMULATOR")
    print_separator()
    print(f"\nCase: {case.title}")
    print(f"{case.industry} | {case.case_type} | {case.case_style.value} | {case.difficulty}\n")

    opening = runner.start()
    print(f"Interviewer: {opening}\n")

    # Conversation loop
    while runner.is_active():
        try:
            candidate_input = input("You: ").strip()

            if not candidate_input:
                continue

            if candidate_input.lower() in ["quit", "exit", "q"]:
                print("\nLeaving the interview...")
                runner.abandon()
                break

            if candidate_input.lower() == "debug":
                print_debug_info(runner)
                continue

            if candidate_input.lower() == "facts":
                print("\nFacts revealed so far:")
                for fact in runner.get_revealed_facts():
                    print(f"  - {fact}")
                print()
                continue

            if candidate_input.lower() == "finish":
                print("\nGrading your interview...")
                try:
                    report = runner.finish()
                except GradingError as e:
                    print(f"\nCould not generate feedback: {e}\n")
                    continue
                print_separator()
                print("INTERVIEW COMPLETE")
                print_separator()
                print_report(report)
                break

            response = runner.respond(candidate_input)
            print(f"\nInterviewer: {response}\n")

            if debug:
                print_debug_info(runner)

        except KeyboardInterrupt:
            print("\n\nEnding interview...")
            runner.abandon()
            break


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Case Interview Simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands during interview:
  quit, exit, q  - Leave the interview (no feedback)
  finish         - End the case and get your performance report
  debug          - Show the interviewer's current state
  facts          - Show the facts revealed so far

Examples:
  python main.py                                   # Interactive case selection
  python main.py ecodrink_profitability            # Run a specific case
  python main.py --random --industry "Financial Services"
  python main.py --generate --case-type "Market Entry"
        """,
    )
    parser.add_argument("case", nargs="?", help="Case ID to run (optional)")
    parser.add_argument("--list", action="store_true", help="List available cases and exit")
    parser.add_argument("--random", action="store_true", help="Pick a catalog case matching the facets")
    parser.add_argument("--generate", action="store_true", help="Generate a brand-new case")
    parser.add_argument("--industry", help="Industry facet")
    parser.add_argument("--case-type", help="Case type facet")
    parser.add_argument("--style", choices=[s.value for s in CaseStyle], help="Case style facet")
    parser.add_argument("--difficulty", help="Difficulty facet")
    parser.add_argument("--no-debug", action="store_true", help="Hide debug output during interview")

    args = parser.parse_args()
    configure_logging("WARNING")

    if args.list:
        print("\nAvailable Cases:")
        for case_id in get_available_cases():
            print(f"  - {case_id}")
        return

    try:
        if args.generate:
            print("\nGenerating a new case...")
            runner = create_generated_interview(args.industry, args.case_type, args.style, args.difficulty)
        elif args.random:
            runner = create_catalog_interview(args.industry, args.case_type, args.style, args.difficulty)
        else:
            case_id = args.case or select_case_interactively()
            runner = create_case_interview(load_case(case_id))

        run_interview(runner, debug=not args.no_debug)
    except MissingCredentialError as e:
        print(f"\n{e} Set ANTHROPIC_API_KEY in your environment or .env file.")
        sys.exit(1)
    except CaseInterviewError as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
