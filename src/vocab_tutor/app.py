"""Interactive CLI application."""
import logging
import os
import sys
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.prompt import Prompt, IntPrompt

from vocab_tutor.db import init_db, DEFAULT_DB_PATH
from vocab_tutor.seed import seed_all, is_seeded
from vocab_tutor.session import (
    start_session, get_max_questions, get_session_limit, set_setting, ReviewSession,
)
from vocab_tutor.questions import generate_retry
from vocab_tutor.recorder import ReviewRecorder, rating_for_matching_errors, rating_for_response
from vocab_tutor.models import (
    ClozeFromExample, Example, MatchingSet, Rating, RecognitionBackward, RecognitionForward,
    SpellFromAudio, WordContent, SessionStats,
)
from vocab_tutor.dashboard import (
    calc_retention_score, get_retention_label, get_retention_color,
    get_wordbook_stats, get_study_stats, time_until_next_review,
)
from vocab_tutor.wordbook import WordbookStore, DuplicateWordError
from vocab_tutor.importer import import_file

console = Console()

EXIT_WORDS = ("q", "menu")
SKIP_WORD = "s"


class SessionExitRequested(Exception):
    """Raised when the user leaves a review session early."""


def session_prompt(prompt: str, choices: list[str] | None = None, **kwargs) -> str:
    if choices is not None:
        choices = list(choices) + [w for w in (*EXIT_WORDS, SKIP_WORD) if w not in choices]
    answer = Prompt.ask(prompt, choices=choices, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str]) -> int | None:
    """Numbered choice; returns None when the user skips."""
    answer = session_prompt(prompt, choices=choices).strip().lower()
    if answer == SKIP_WORD:
        return None
    return int(answer)


def show_welcome():
    console.print(Panel(
        "[bold]Vocab Tutor[/bold]\n[dim]Spaced repetition wordbook[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("review", "Today's review session"),
        ("words", "List the wordbook"),
        ("add", "Add a word"),
        ("import", "Import a word list"),
        ("dashboard", "Retention score + progress"),
        ("settings", "Session length"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def ask_choice(question, number: int, total: int) -> tuple[bool | None, str]:
    console.print(Panel(question.prompt, title=f"Question {number}/{total}", border_style="cyan"))
    for i, option in enumerate(question.options, 1):
        console.print(f"  [cyan]{i})[/cyan] {option}")
    picked = session_int_prompt(
        "\nYour answer", choices=[str(i) for i in range(1, len(question.options) + 1)],
    )
    if picked is None:
        return None, question.answer
    return question.is_correct(question.options[picked - 1]), question.answer


def ask_typed(question, number: int, total: int) -> tuple[bool | None, str]:
    if isinstance(question, ClozeFromExample):
        body = question.sentence
        if question.translation:
            body += f"\n[dim]{question.translation}[/dim]"
        title = "Fill in the blank"
    else:
        body = question.definition
        if question.phonetic:
            body += f"\n[dim]{question.phonetic}[/dim]"
        title = "Spell the word"
    console.print(Panel(body, title=f"{title} {number}/{total}", border_style="cyan"))
    typed = session_prompt("Your answer")
    if typed.strip().lower() == SKIP_WORD:
        return None, question.answer
    return question.is_correct(typed), question.answer


def run_matching(question: MatchingSet, number: int, total: int) -> dict[str, int | None]:
    """Pair words with definitions; returns mismatches per item id, None for skipped words."""
    errors = {pair.item_id: 0 for pair in question.pairs}
    remaining = list(question.pairs)
    definitions = sorted(p.definition for p in question.pairs)
    console.print(f"\n[bold]Matching {number}/{total}[/bold]: pair each word with its definition")
    while remaining:
        for i, pair in enumerate(remaining, 1):
            console.print(f"  [cyan]{i})[/cyan] {pair.word}")
        letters = "abcdef"[:len(definitions)]
        for letter, definition in zip(letters, definitions):
            console.print(f"  [magenta]{letter})[/magenta] {definition}")
        answer = session_prompt("Pair (e.g. 1a, s to skip)").strip().lower()
        if answer == SKIP_WORD:
            for pair in remaining:
                errors[pair.item_id] = None
            console.print("[dim]Skipped the remaining words.[/dim]")
            break
        if len(answer) != 2 or not answer[0].isdigit() or answer[1] not in letters:
            console.print("[red]Enter a number followed by a letter.[/red]")
            continue
        index = int(answer[0]) - 1
        if not 0 <= index < len(remaining):
            console.print("[red]No such word.[/red]")
            continue
        pair = remaining[index]
        chosen = definitions[letters.index(answer[1])]
        if question.is_match(pair.item_id, chosen):
            console.print(f"[green]{pair.word} matched![/green]")
            remaining.pop(index)
            definitions.remove(chosen)
        else:
            console.print("[red]Not a match.[/red]")
            errors[pair.item_id] += 1
    return errors


def run_review_session(session: ReviewSession, recorder: ReviewRecorder) -> SessionStats:
    if not session.questions:
        console.print("[yellow]Nothing to review right now![/yellow]")
        return recorder.finalize()
    questions = list(session.questions)
    missed = []
    retried = False
    console.print(f"\n[bold]Review Session[/bold] — {len(session.items)} words\n")
    i = 0
    while i < len(questions):
        question = questions[i]
        i += 1
        if isinstance(question, MatchingSet):
            errors = run_matching(question, i, len(questions))
            for item_id, count in errors.items():
                if count is None:
                    recorder.record_skip(session.item(item_id))
                    continue
                rating = rating_for_matching_errors(count)
                recorder.record_answer(session.item(item_id), rating)
                if rating is Rating.AGAIN:
                    missed.append(item_id)
        else:
            if isinstance(question, (RecognitionForward, RecognitionBackward)):
                correct, answer = ask_choice(question, i, len(questions))
            else:
                correct, answer = ask_typed(question, i, len(questions))
            item = session.item(question.item_id)
            if correct is None:
                recorder.record_skip(item)
                console.print(f"[dim]Skipped. Answer: {answer}[/dim]")
            else:
                recorder.record_answer(item, rating_for_response(correct))
                if correct:
                    console.print("[green]Correct![/green]")
                else:
                    console.print(f"[red]Incorrect.[/red] Answer: [green]{answer}[/green]")
                    missed.append(question.item_id)
        console.print()
        if i == len(questions) and missed and not retried:
            retried = True
            retry_items = [session.item(item_id) for item_id in dict.fromkeys(missed)]
            questions.extend(generate_retry(retry_items, session.rng))
            console.print(f"[yellow]One more try for {len(retry_items)} missed word(s).[/yellow]\n")
    return recorder.finalize()


def show_session_stats(stats: SessionStats) -> None:
    console.print(Panel(
        f"Words: [bold]{stats.items}[/bold]  |  Correct: [green]{stats.correct}[/green]  |  "
        f"Wrong: [red]{stats.wrong}[/red]  |  Skipped: {stats.skipped}\n"
        f"Accuracy: [bold]{stats.accuracy * 100:.0f}%[/bold]",
        title="Session Complete", border_style="green",
    ))


def cmd_review(db_path: str):
    store = WordbookStore(db_path)
    session = start_session(
        store, limit=get_session_limit(db_path), max_questions=get_max_questions(db_path),
    )
    recorder = ReviewRecorder(store)
    try:
        stats = run_review_session(session, recorder)
    except SessionExitRequested:
        console.print("[dim]Session ended early. Answers so far are saved.[/dim]")
        stats = recorder.finalize()
    if stats.total:
        store.save_session_stats(stats)
        show_session_stats(stats)


def cmd_words(db_path: str):
    now = datetime.now()
    items = WordbookStore(db_path).load_items()
    if not items:
        console.print("[yellow]Your wordbook is empty. Use 'add' or 'import'.[/yellow]")
        return
    table = Table(title="Wordbook")
    table.add_column("Word", style="cyan")
    table.add_column("Definition")
    table.add_column("State")
    table.add_column("Stability", justify="right")
    table.add_column("Next", justify="right")
    for item in sorted(items, key=lambda i: i.content.word.lower()):
        label = time_until_next_review(item, now)
        table.add_row(
            item.content.word,
            item.content.definition,
            item.memory.state.value,
            f"{item.memory.stability:.1f}d",
            f"[yellow]{label}[/yellow]" if label == "due" else label,
        )
    console.print(table)


def cmd_add(db_path: str):
    word = Prompt.ask("Word").strip()
    definition = Prompt.ask("Definition").strip()
    if not word or not definition:
        console.print("[red]A word and a definition are required.[/red]")
        return
    pos = Prompt.ask("Part of speech", default="")
    example = Prompt.ask("Example sentence", default="")
    content = WordContent(
        word=word, definition=definition, part_of_speech=pos,
        examples=(Example(sentence=example),) if example else (),
    )
    try:
        WordbookStore(db_path).add_word(content)
    except DuplicateWordError:
        console.print(f"[yellow]'{word}' is already in your wordbook.[/yellow]")
        return
    console.print(f"[green]Added {word}.[/green]")


def cmd_import(db_path: str):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_file(db_path, file_path)
    console.print(
        f"[green]Imported {result['filename']}: {result['added']} added[/green]"
        f"[dim], {result['skipped']} already present, {result['invalid']} invalid[/dim]"
    )


def cmd_dashboard(db_path: str):
    score = calc_retention_score(db_path)
    label = get_retention_label(score)
    color = get_retention_color(score)
    words = get_wordbook_stats(db_path)
    stats = get_study_stats(db_path)

    console.print(Panel(
        f"[bold]{words['total_words']} words, {words['need_review']} to review[/bold]",
        title="Wordbook Dashboard", border_style="blue",
    ))

    bar_filled = int(score / 5)
    bar_empty = 20 - bar_filled
    bar = f"[{color}]{'█' * bar_filled}{'░' * bar_empty}[/{color}]"
    console.print(f"\n  Retention: [bold]{score}%[/bold] {bar} [{color}]{label}[/{color}]\n")

    table = Table(title="Memory States")
    table.add_column("State", style="cyan")
    table.add_column("Words", justify="right")
    for state, count in words["by_state"].items():
        table.add_row(state, str(count))
    console.print(table)

    console.print(f"\n  Sessions: [bold]{stats['sessions_completed']}[/bold]  |  "
                  f"Reviews: [bold]{stats['reviews_logged']}[/bold]  |  "
                  f"Lapses: [bold]{words['lapses']}[/bold]  |  "
                  f"Avg Accuracy: [bold]{stats['avg_session_accuracy']}%[/bold]")


def cmd_settings(db_path: str):
    current = get_max_questions(db_path)
    count = IntPrompt.ask("Questions per session", default=current)
    if count < 1:
        console.print("[red]Must be at least 1.[/red]")
        return
    set_setting(db_path, "max_questions", str(count))
    console.print(f"[green]Sessions will have up to {count} questions.[/green]")


def configure_logging() -> None:
    level = logging.DEBUG if os.environ.get("VOCAB_TUTOR_DEBUG") else logging.WARNING
    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def main():
    configure_logging()
    db_path = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_DB_PATH
    init_db(db_path)
    first_run = not is_seeded(db_path)
    if first_run:
        console.print("[dim]Setting up for first use...[/dim]")
    seed_all(db_path)
    if first_run:
        console.print("[green]Ready![/green]\n")

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="review").strip().lower()
        try:
            if choice == "review":
                cmd_review(db_path)
            elif choice == "words":
                cmd_words(db_path)
            elif choice == "add":
                cmd_add(db_path)
            elif choice == "import":
                cmd_import(db_path)
            elif choice == "dashboard":
                cmd_dashboard(db_path)
            elif choice == "settings":
                cmd_settings(db_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]See you at the next review![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
