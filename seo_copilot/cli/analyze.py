"""One-off analysis commands.

Runs a single inbound operation from the terminal and prints a summary,
or the full response envelope with --json.
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer

from seo_copilot.cli.utils import (
    build_orchestrator,
    display_info,
    display_success,
    display_warning,
    handle_errors,
    print_json,
    read_text,
    run_with_orchestrator,
)
from seo_copilot.models.seo import AnalysisDepth, EnhanceMode


@handle_errors
def competitors_command(
    website_url: str = typer.Argument(..., help="Website to analyze"),
    keywords: List[str] = typer.Option(
        ..., "--keyword", "-k", help="Target keyword (repeatable)"
    ),
    depth: AnalysisDepth = typer.Option(AnalysisDepth.DETAILED, "--depth"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c"),
    json_output: bool = typer.Option(False, "--json", help="Print the full envelope"),
):
    """Analyze competitors for a website."""
    orchestrator = build_orchestrator(config_path)
    payload = {
        "websiteUrl": website_url,
        "targetKeywords": keywords,
        "analysisDepth": depth.value,
    }
    response = run_with_orchestrator(
        orchestrator, lambda o: o.competitors.analyze(payload)
    )

    if json_output:
        print_json(response.to_json_dict())
        return

    result = response.data
    meta = result.analysis_metadata
    display_success(
        f"{meta.total_competitors} competitors, confidence {meta.confidence}"
        f" ({', '.join(meta.providers_succeeded)})"
    )
    if meta.providers_failed:
        display_warning(
            "Failed: "
            + ", ".join(f"{p} ({code})" for p, code in meta.providers_failed.items())
        )
    for competitor in result.competitors:
        typer.echo(f"  {competitor.domain}  DA={competitor.domain_authority}")
    display_info("Opportunities:")
    for opportunity in result.opportunities:
        typer.echo(
            f"  [{opportunity.content_type}] {opportunity.topic}"
            f" (difficulty {opportunity.difficulty}, potential {opportunity.potential})"
        )


@handle_errors
def content_command(
    content_file: Path = typer.Argument(..., help="Draft to analyze (text/markdown)"),
    title: str = typer.Option(..., "--title", "-t"),
    meta_description: str = typer.Option("", "--meta"),
    keywords: List[str] = typer.Option([], "--keyword", "-k"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c"),
    json_output: bool = typer.Option(False, "--json", help="Print the full envelope"),
):
    """Score a draft for readability, SEO and originality."""
    payload = {
        "title": title,
        "metaDescription": meta_description,
        "content": read_text(content_file),
        "targetKeywords": keywords,
    }
    orchestrator = build_orchestrator(config_path)
    response = run_with_orchestrator(orchestrator, lambda o: o.content.analyze(payload))

    if json_output:
        print_json(response.to_json_dict())
        return

    scores = response.data.scores
    display_success(f"Overall score: {scores.overall}")
    for name, value in scores.model_dump(exclude={"overall"}).items():
        marker = " (default)" if name in response.data.defaulted_scores else ""
        typer.echo(f"  {name:<20} {value}{marker}")
    for suggestion in response.data.suggestions:
        typer.echo(f"  - {suggestion.message}")


@handle_errors
def enhance_command(
    content_file: Path = typer.Argument(..., help="Draft to rewrite"),
    mode: EnhanceMode = typer.Option(EnhanceMode.READABILITY, "--mode", "-m"),
    grade_level: int = typer.Option(8, "--grade-level", "-g"),
    prompt: Optional[str] = typer.Option(None, "--prompt", help="Custom prompt"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c"),
    json_output: bool = typer.Option(False, "--json", help="Print the full envelope"),
):
    """Rewrite a draft through the provider router."""
    payload = {
        "content": read_text(content_file),
        "mode": mode.value,
        "targetGradeLevel": grade_level,
        "prompt": prompt,
    }
    orchestrator = build_orchestrator(config_path)
    response = run_with_orchestrator(
        orchestrator, lambda o: o.enhancement.enhance(payload)
    )

    if json_output:
        print_json(response.to_json_dict())
        return

    result = response.data
    display_info(
        f"Enhanced with {result.provider_used}:"
        f" {result.original_length} -> {result.enhanced_length} chars"
    )
    typer.echo(result.enhanced_content)


@handle_errors
def keywords_command(
    seeds: List[str] = typer.Argument(..., help="Seed keywords"),
    audience: Optional[str] = typer.Option(None, "--audience"),
    industry: Optional[str] = typer.Option(None, "--industry"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c"),
    json_output: bool = typer.Option(False, "--json", help="Print the full envelope"),
):
    """Research keywords around seed terms."""
    payload = {"seedKeywords": seeds, "targetAudience": audience, "industry": industry}
    orchestrator = build_orchestrator(config_path)
    response = run_with_orchestrator(
        orchestrator, lambda o: o.keywords.research(payload)
    )

    if json_output:
        print_json(response.to_json_dict())
        return

    result = response.data
    display_success(
        f"{result.metadata.total_keywords} keywords,"
        f" avg difficulty {result.metadata.avg_difficulty}"
    )
    for keyword in result.keywords:
        typer.echo(f"  {keyword.keyword:<40} volume={keyword.search_volume} difficulty={keyword.difficulty}")


class CheckFocus(str, Enum):
    READABILITY = "readability"
    ORIGINALITY = "originality"
    RECOMMENDATIONS = "recommendations"


@handle_errors
def check_command(
    content_file: Path = typer.Argument(..., help="Draft to check"),
    focus: CheckFocus = typer.Option(CheckFocus.READABILITY, "--focus", "-f"),
    keywords: Optional[List[str]] = typer.Option(None, "--keyword", "-k"),
    insights: Optional[str] = typer.Option(
        None, "--insights", help="First-hand experience behind the draft"
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c"),
    json_output: bool = typer.Option(False, "--json", help="Print the full envelope"),
):
    """Run one focused check (readability, originality or SEO tips) on a draft."""
    payload = {
        "content": read_text(content_file),
        "targetKeywords": keywords or [],
        "humanInsights": insights,
    }
    orchestrator = build_orchestrator(config_path)
    service_call = {
        CheckFocus.READABILITY: lambda o: o.focused.readability(payload),
        CheckFocus.ORIGINALITY: lambda o: o.focused.originality(payload),
        CheckFocus.RECOMMENDATIONS: lambda o: o.focused.seo_recommendations(payload),
    }[focus]
    response = run_with_orchestrator(orchestrator, service_call)

    if json_output:
        print_json(response.to_json_dict())
        return

    display_info(f"{focus.value} check served by {response.metadata.provider}")
    if focus == CheckFocus.RECOMMENDATIONS:
        for tip in response.data.recommendations:
            typer.echo(f"  - {tip}")
        return
    for name, value in response.data.model_dump(exclude={"suggestions"}).items():
        if value not in (None, []):
            typer.echo(f"  {name:<24} {value}")
    for suggestion in response.data.suggestions:
        typer.echo(f"  - {suggestion}")
