import argparse
import logging
import warnings

from rich.console import Console
from rich.logging import RichHandler

from nitjsr_rag.exceptions import ConfigurationError, RagError
from nitjsr_rag.rag_manager import get_rag_system

warnings.filterwarnings("ignore", category=DeprecationWarning)

log = logging.getLogger(__name__)
console = Console()


def print_answer(answer):
    console.print("\n🤖 [bold]Answer:[/bold]\n", answer.answer.strip())
    console.print(f"\n[dim]Confidence: {answer.confidence:.3f}[/dim]")

    if answer.relevant_links:
        console.print("\n🔗 [bold]Relevant links:[/bold]")
        for link in answer.relevant_links:
            kind = "PDF Document" if link.is_pdf else "Web Page"
            console.print(f"- {link.text}: {link.url} ({kind})")

    if answer.sources:
        console.print("\n📚 [bold]Sources:[/bold]")
        seen = set()
        for source in answer.sources:
            if source.url and source.url not in seen:
                seen.add(source.url)
                console.print(f"- [{source.score:.2f}] {source.title or source.url}: {source.url}")


def list_links(rag, link_type: str):
    entries = rag.link_db.by_type(link_type)
    console.print(f"[bold]{len(entries)} {link_type} entries[/bold]")
    for entry in entries:
        console.print(f"- {entry.text}: {entry.url}")


def main():
    parser = argparse.ArgumentParser(description="Ask questions about NIT Jamshedpur.")
    parser.add_argument("question", nargs="*", help="Ask once and exit instead of starting the prompt loop.")
    parser.add_argument("--links", choices=["pdf", "page", "pdf_document"], help="List link database entries of one type.")
    parser.add_argument("--stats", action="store_true", help="Print index statistics.")
    args = parser.parse_args()

    logging.basicConfig(
        level="WARNING",
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )

    try:
        rag = get_rag_system()
    except ConfigurationError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise SystemExit(1)

    if args.links:
        list_links(rag, args.links)
        return
    if args.stats:
        console.print(rag.index_stats())
        return

    if args.question:
        try:
            print_answer(rag.chat(" ".join(args.question)))
        except RagError as e:
            console.print(f"[red]⚠️ Could not answer the question: {e}[/red]")
            raise SystemExit(1)
        return

    while True:
        try:
            question = input("\n❓ Your question (ENTER to quit): ").strip()
            if not question:
                break
            print_answer(rag.chat(question))
        except RagError as e:
            console.print(f"[red]⚠️ Could not answer the question: {e}[/red]")
        except KeyboardInterrupt:
            print("\n👋 Bye!")
            break


if __name__ == "__main__":
    main()
