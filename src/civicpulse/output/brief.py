"""Text renditions of the dashboard card."""

import json
from typing import Dict, List

GAUGE_WIDTH = 40


def _signed(value: float, digits: int = 1) -> str:
    return f"{value:+.{digits}f}"


def render_gauge(index: float, width: int = GAUGE_WIDTH) -> str:
    """ASCII gauge on the -100 (autocracy) .. +100 (democracy) scale."""
    clamped = max(-100.0, min(100.0, index))
    position = round((clamped + 100) / 200 * (width - 1))
    cells = ["-"] * width
    cells[width // 2] = "|"
    cells[position] = "#"
    return f"-100 Autocracy [{''.join(cells)}] +100 Democracy"


def render_markdown(dashboard: Dict) -> str:
    """
    Render dashboard data as markdown.

    Args:
        dashboard: Dict from api.index_api.get_dashboard

    Returns:
        Markdown string
    """
    lines: List[str] = []
    index = dashboard["index"]

    lines.append(f"# Today's Index: {index:.1f}")
    lines.append("")
    lines.append(f"**Generated:** {dashboard['generated_at_utc']}")
    lines.append("")
    lines.append("```")
    lines.append(render_gauge(index))
    lines.append("```")
    lines.append("")

    stats = dashboard["stats"]
    lines.append("## Summary")
    lines.append("")
    lines.append(f"- **Total events:** {stats['total']}")
    lines.append(f"- **Net impact:** {_signed(stats['net_impact'], 2)}")
    lines.append(f"- **Avg confidence:** {stats['average_confidence'] * 100:.0f}%")
    lines.append(f"- **Toward democracy / autocracy:** {stats['positive']} / {stats['negative']}")
    if stats.get("latest_event_date"):
        lines.append(f"- **Latest event:** {stats['latest_event_date']}")
    lines.append("")

    lines.append("## Categories")
    lines.append("")
    lines.append("| Category | Score | Weight | Share | Events |")
    lines.append("|---|---:|---:|---:|---:|")
    for row in dashboard["categories"]:
        lines.append(
            f"| {row['category']} | {_signed(row['score'])} | {row['weight']:.2f} "
            f"| {row['share'] * 100:.0f}% | {row['event_count']} |"
        )
    lines.append("")

    recent = dashboard["recent_events"]
    lines.append("## Recent Events")
    lines.append("")
    if not recent:
        lines.append("No events yet. Run `civicpulse refresh` or `civicpulse import FILE`.")
        lines.append("")
        return "\n".join(lines)

    for event in recent:
        arrow = "▲" if event["direction"] == 1 else "▼"
        title = f"[{event['title']}]({event['url']})" if event.get("url") else event["title"]
        lines.append(f"- {arrow} **{event['category']}** {title}")
        lines.append(
            f"  - {event['date']} | magnitude {event['magnitude']:.1f} "
            f"| confidence {event['confidence'] * 100:.0f}%"
        )
        if event.get("summary"):
            lines.append(f"  - {event['summary']}")
    lines.append("")

    return "\n".join(lines)


def render_json(dashboard: Dict) -> str:
    """Render dashboard data as JSON."""
    return json.dumps(dashboard, indent=2, ensure_ascii=False)
