"""
Training and Evaluation with Rich Terminal UI

This module trains a selected language model and reports perplexity and
word error rates with progress spinners, panels and tables from the Rich
library.
"""

import math
from typing import Dict, Iterable, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from .base import LanguageModel
from .evaluation import (
    ACOUSTIC_SCALE, aggregate_error_rate, extract_correct_sentences, hypothesis_scores,
    perplexity, rescore_all, word_error_rate_lower_bound, word_error_rate_random_choice,
    word_error_rate_upper_bound
)
from .factory import ModelKind, get_model
from .nbest import SpeechNBestList


console = Console()


def create_stats_table(stats: Dict) -> Table:
    """Create a Rich table displaying statistics."""
    table = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="green")
    table.add_column("Value", style="yellow", justify="right")

    for key, value in stats.items():
        display_key = key.replace('_', ' ').title()

        if isinstance(value, float):
            display_value = "inf" if math.isinf(value) else f"{value:,.4f}"
        elif isinstance(value, int):
            display_value = f"{value:,}"
        else:
            display_value = str(value)

        table.add_row(display_key, display_value)

    return table


def train_model_cli(kind: ModelKind,
                    sentences: Optional[Iterable[Sequence[str]]] = None,
                    sri_path: Optional[str] = None,
                    params: Optional[Dict] = None,
                    corpus_label: str = "") -> LanguageModel:
    """
    Build a language model with terminal output.

    Args:
        kind: Selected model
        sentences: Training sentences (unused by the sri model)
        sri_path: ARPA file for the sri model
        params: Hyperparameters for the model constructor
        corpus_label: Description of the training data for the header

    Returns:
        Trained LanguageModel
    """
    params = dict(params or {})

    console.print()
    console.print(Panel.fit(
        "[bold blue]N-gram Language Model Training[/bold blue]",
        border_style="blue"
    ))

    config_table = Table(box=box.SIMPLE, show_header=False)
    config_table.add_column("Setting", style="cyan")
    config_table.add_column("Value", style="white")
    config_table.add_row("Model", kind.value)
    config_table.add_row("Training Data", sri_path if kind == ModelKind.SRI else corpus_label)
    for key, value in params.items():
        config_table.add_row(key.replace('_', ' ').title(), str(value))

    console.print(Panel(config_table, title="[bold]Configuration[/bold]", border_style="green"))

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console
    ) as progress:
        task = progress.add_task("[cyan]Training model...", total=None)

        if kind != ModelKind.SRI:
            def update_progress(current):
                progress.update(task, description=f"[cyan]Processed {current:,} sentences")
            params['progress_callback'] = update_progress

        model = get_model(kind, sentences, sri_path=sri_path, **params)
        progress.remove_task(task)

    console.print("[green]✓[/green] Training complete!")
    console.print(Panel(
        create_stats_table(model.training_stats),
        title="[bold]Training Statistics[/bold]",
        border_style="yellow"
    ))

    return model


def display_hypothesis(prefix: str, guess: Sequence[str], nbest_list: SpeechNBestList,
                       model: LanguageModel, acoustic_scale: float = ACOUSTIC_SCALE) -> None:
    acoustic, language = hypothesis_scores(model, nbest_list, guess, acoustic_scale)
    console.print(f"{prefix}\tAM: {acoustic:.2e}\tLM: {language:.2e}\t"
                  f"Total: {acoustic + language:.2e}\t{' '.join(guess)}",
                  highlight=False, markup=False)


def evaluate_model_cli(model: LanguageModel, nbest_lists: List[SpeechNBestList],
                       acoustic_scale: float = ACOUSTIC_SCALE,
                       verbose: bool = False) -> Dict:
    """
    Evaluate a model on N-best lists with terminal output.

    Args:
        model: Trained LanguageModel
        nbest_lists: N-best lists with gold sentences
        acoustic_scale: Divisor applied to acoustic scores
        verbose: Print the selected and gold hypothesis of every list

    Returns:
        Dictionary of evaluation metrics
    """
    console.print()
    console.print(Panel.fit("[bold blue]Model Evaluation[/bold blue]", border_style="blue"))

    with console.status("[cyan]Rescoring N-best lists..."):
        hub_perplexity = perplexity(model, extract_correct_sentences(nbest_lists))
        results = rescore_all(model, nbest_lists, acoustic_scale)

    if verbose:
        for result in results:
            console.print()
            display_hypothesis("GUESS:", result.best_guess, result.nbest_list,
                               model, acoustic_scale)
            display_hypothesis("GOLD:", result.nbest_list.correct_sentence,
                               result.nbest_list, model, acoustic_scale)

    metrics = {
        'hub_perplexity': hub_perplexity,
        'wer_best_path': word_error_rate_lower_bound(nbest_lists),
        'wer_worst_path': word_error_rate_upper_bound(nbest_lists),
        'wer_avg_path': word_error_rate_random_choice(nbest_lists),
        'hub_word_error_rate': aggregate_error_rate((r.distance for r in results), nbest_lists),
        'nbest_lists': len(nbest_lists)
    }

    console.print(Panel(
        create_stats_table(metrics),
        title="[bold]Evaluation Results[/bold]",
        border_style="green"
    ))

    if model.diagnostics:
        console.print(f"[yellow]![/yellow] {len(model.diagnostics):,} numerical "
                      f"diagnostics recorded while scoring")

    return metrics


def show_generated_sentences(model: LanguageModel, count: int, max_length: int = 30) -> None:
    console.print()
    console.print(Panel.fit("[bold]Generated Sentences[/bold]", border_style="magenta"))
    for _ in range(count):
        sentence = model.generate_sentence(max_length=max_length)
        console.print(f"  {' '.join(sentence)}", highlight=False, markup=False)
