#!/usr/bin/env python3
"""
HireBridge - Main Entry Point.

Usage:
    python main.py                                  # Run the FastAPI server
    python main.py --cli                            # Run an interview in the terminal
    python main.py --cli --role "Data Analyst"      # Pick the interview track
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path


def setup_python_path():
    """Add project root to Python path."""
    project_root = Path(__file__).parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))


def run_server(host: str = None, port: int = None):
    """Launch the FastAPI server with uvicorn."""
    import uvicorn
    from hirebridge.core.config import configure_logging

    # Configure logging before starting server
    configure_logging()

    if host is None:
        host = os.getenv("HOST", "127.0.0.1")

    if port is None:
        port = int(os.getenv("PORT", "8080"))

    is_production = bool(os.getenv("RAILWAY_ENVIRONMENT") or os.getenv("RENDER"))
    enable_reload = not is_production

    print("\n" + "=" * 60)
    print("🎙️  HireBridge - Adaptive Mock Interviews")
    print("=" * 60)
    print(f"\n🌐 API: http://{host}:{port}/api")
    print(f"📚 API Docs: http://{host}:{port}/api/docs")
    print(f"🏢 Environment: {'Production' if is_production else 'Development'}")
    print("\nPress Ctrl+C to stop the server\n")

    # Sessions live in process memory: always a single worker
    uvicorn.run(
        "hirebridge.api.app:app",
        host=host,
        port=port,
        reload=enable_reload,
        reload_dirs=["hirebridge"] if enable_reload else None,
        workers=1,
        log_level="info",
        access_log=False,
    )


async def run_cli_interview(role: str, max_questions: int):
    """Run an interview in the terminal through the orchestrator."""
    setup_python_path()

    from hirebridge.app.orchestrator import create_orchestrator
    from hirebridge.core.config import configure_logging

    configure_logging()
    logger = logging.getLogger(__name__)

    print("\n" + "=" * 60)
    print(f"🎙️  HireBridge - {role} Interview")
    print("=" * 60 + "\n")

    orchestrator = create_orchestrator()
    if not orchestrator.oracle_enabled:
        print("⚠️  No GEMINI_API_KEY: answers get the default score\n")

    try:
        turn = await orchestrator.start(role)
        print(f"🤖 {turn.question}\n")
        input("Press Enter to begin...")

        turn = await orchestrator.advance(turn.interview_id, is_first_question=True)

        while True:
            print(f"\n🎯 Question {turn.question_number} [{turn.difficulty.value} / {turn.topic_tag}]")
            print(f"   {turn.question}")
            if turn.code_snippet:
                print("\n" + turn.code_snippet + "\n")

            answer = input("💬 Your answer (empty line to finish): ").strip()
            if not answer:
                break

            print("⏳ Scoring...")
            turn = await orchestrator.advance(turn.interview_id, answer)
            if turn.question_number > max_questions:
                break

        report = await orchestrator.finish(turn.interview_id)

        print("\n" + "=" * 60)
        print("🏁 Interview Complete!")
        print(f"   Score: {report.score}/100 ({report.rating})")
        print(f"   Answered: {report.answered_questions}/{report.total_questions}")
        print(f"   Duration: {report.interview_duration:.1f} min")
        print("\n   👍 Strengths:")
        for item in report.strengths:
            print(f"      - {item}")
        print("   💡 Improvements:")
        for item in report.improvements:
            print(f"      - {item}")
        print(f"\n   ➡️  {report.recommendation}")
        print("=" * 60 + "\n")

    except Exception as e:
        logger.error(f"Interview error: {e}", exc_info=True)
        print(f"\n❌ Error: {e}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="HireBridge - Adaptive Mock Interviews"
    )
    parser.add_argument(
        "--cli",
        action="store_true",
        help="Run an interview in the terminal instead of the web server",
    )
    parser.add_argument(
        "--role",
        default="Software Developer",
        help="Interview track for --cli (default: Software Developer)",
    )
    parser.add_argument(
        "--max-questions",
        type=int,
        default=5,
        help="Stop the --cli interview after this many questions",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Host to bind the server (default: HOST or 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server (default: PORT or 8080)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    setup_python_path()

    if args.debug:
        os.environ["LOG_LEVEL"] = "DEBUG"

    if args.cli:
        asyncio.run(run_cli_interview(args.role, args.max_questions))
    else:
        run_server(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
