"""
Interactive review: a Textual app that walks the pending proposals of a
controller and lets the user accept, reject or refactor each one.
"""

from __future__ import annotations

import logging

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Button, Footer, Input, Static

from .errors import EditGateError
from .proposals.controller import EditLifecycleController
from .proposals.models import EditProposal

logger = logging.getLogger(__name__)


def _escape(text: str) -> str:
    return text.replace("[", "\\[")


def _format_rich_diff(diff_text: str) -> str:
    """Convert unified diff text to Rich markup for Textual display."""
    markup_lines: list[str] = []
    for line in diff_text.splitlines():
        escaped = _escape(line)
        if line.startswith("+++") or line.startswith("---"):
            markup_lines.append(f"[bold white]{escaped}[/bold white]")
        elif line.startswith("@@"):
            markup_lines.append(f"[cyan]{escaped}[/cyan]")
        elif line.startswith("+"):
            markup_lines.append(f"[green]{escaped}[/green]")
        elif line.startswith("-"):
            markup_lines.append(f"[red]{escaped}[/red]")
        else:
            markup_lines.append(escaped)
    return "\n".join(markup_lines)


def _format_rich_proposal(proposal: EditProposal) -> str:
    out = [
        f"[bold yellow]{_escape(proposal.id)}[/bold yellow]  "
        f"[dim]{proposal.kind.value}[/dim]",
        f"[bold]{_escape(proposal.description)}[/bold]",
    ]
    if proposal.expected_outcome:
        out.append(f"[dim]{_escape(proposal.expected_outcome)}[/dim]")
    if proposal.supersedes:
        out.append(f"[dim]refactored from {proposal.supersedes}: "
                   f"{_escape(proposal.refactor_reason or '')}[/dim]")
    impact = (proposal.diff.stats.get("impact") if proposal.diff else None)
    if impact:
        out.append(f"Impact: [bold]{impact['level']}[/bold] - "
                   f"{_escape(impact['description'])}")
    for warning in proposal.warnings:
        out.append(f"[yellow]Warning: {_escape(warning)}[/yellow]")
    out.append(f"[#444]{'─' * 58}[/#444]")
    if proposal.diff is not None and proposal.diff.text:
        out.append(_format_rich_diff(proposal.diff.text))
    elif proposal.diff is not None:
        out.append("[dim](no content changes)[/dim]")
    else:
        out.append(f"[bold]$ {_escape(proposal.target)}[/bold]")
    return "\n".join(out)


class ProposalReviewApp(App):
    """Pending-proposal reviewer with accept / reject / refactor."""

    CSS = """
    Screen {
        background: $surface;
    }
    #title-bar {
        dock: top;
        height: 3;
        background: #1a1a2e;
        color: #e94560;
        text-align: center;
        padding: 1;
        text-style: bold;
    }
    #proposal-scroll {
        height: 1fr;
        margin: 1 2;
        border: round #444;
        padding: 1;
    }
    #refactor-input {
        dock: bottom;
        margin: 0 2;
        display: none;
    }
    #action-buttons {
        dock: bottom;
        height: 3;
        align: center middle;
        padding: 0 2;
    }
    #action-buttons Button {
        margin: 0 2;
        min-width: 16;
    }
    #summary {
        dock: bottom;
        height: 1;
        text-align: center;
        color: #888;
    }
    """

    BINDINGS = [
        Binding("a", "accept", "Accept"),
        Binding("r", "reject", "Reject"),
        Binding("f", "refactor", "Refactor"),
        Binding("n", "next", "Next"),
        Binding("p", "previous", "Previous"),
        Binding("q", "quit", "Quit"),
        Binding("escape", "cancel_refactor", "Cancel", show=False),
    ]

    def __init__(self, controller: EditLifecycleController) -> None:
        super().__init__()
        self._controller = controller
        self._index = 0
        self.decisions: list[tuple[str, str, str]] = []

    def compose(self) -> ComposeResult:
        yield Static("", id="title-bar")
        with VerticalScroll(id="proposal-scroll"):
            yield Static("", id="proposal-body")
        yield Static("", id="summary")
        yield Input(placeholder="Refactor instructions, Enter to submit",
                    id="refactor-input")
        with Horizontal(id="action-buttons"):
            yield Button("✔ Accept", id="accept-btn", variant="success")
            yield Button("✕ Reject", id="reject-btn", variant="error")
            yield Button("↻ Refactor", id="refactor-btn", variant="primary")
        yield Footer()

    def on_mount(self) -> None:
        self._refresh_view()

    # -- helpers -------------------------------------------------------

    def _pending(self) -> list[EditProposal]:
        return self._controller.list_pending()

    def _current(self) -> EditProposal | None:
        pending = self._pending()
        if not pending:
            return None
        self._index = min(self._index, len(pending) - 1)
        return pending[self._index]

    def _set_summary(self, message: str) -> None:
        self.query_one("#summary", Static).update(_escape(message))

    def _refresh_view(self) -> None:
        pending = self._pending()
        title = self.query_one("#title-bar", Static)
        body = self.query_one("#proposal-body", Static)
        proposal = self._current()
        if proposal is None:
            title.update(" ━━  Edit Review - nothing pending  ━━ ")
            body.update("[dim]No pending edits. Press Q to quit.[/dim]")
            return
        title.update(
            f" ━━  Edit Review - {self._index + 1} of {len(pending)} pending  ━━ "
        )
        body.update(_format_rich_proposal(proposal))

    def _record(self, action: str, proposal_id: str, outcome: str) -> None:
        self.decisions.append((action, proposal_id, outcome))
        self._set_summary(f"{action} {proposal_id}: {outcome}")

    # -- actions -------------------------------------------------------

    def action_accept(self) -> None:
        proposal = self._current()
        if proposal is None:
            return
        try:
            result = self._controller.accept(proposal.id)
        except EditGateError as exc:
            self._set_summary(f"Error: {exc}")
            return
        outcome = result.status.value if result.success else f"failed: {result.error}"
        self._record("accept", proposal.id, outcome)
        self._refresh_view()

    def action_reject(self) -> None:
        proposal = self._current()
        if proposal is None:
            return
        try:
            self._controller.reject(proposal.id, "Rejected in review")
        except EditGateError as exc:
            self._set_summary(f"Error: {exc}")
            return
        self._record("reject", proposal.id, "rejected")
        self._refresh_view()

    def action_refactor(self) -> None:
        if self._current() is None:
            return
        field = self.query_one("#refactor-input", Input)
        field.display = True
        field.focus()

    def action_cancel_refactor(self) -> None:
        field = self.query_one("#refactor-input", Input)
        field.value = ""
        field.display = False

    def on_input_submitted(self, event: Input.Submitted) -> None:
        instructions = event.value.strip()
        self.action_cancel_refactor()
        proposal = self._current()
        if proposal is None or not instructions:
            return
        try:
            new_id = self._controller.refactor(proposal.id, instructions)
        except EditGateError as exc:
            self._set_summary(f"Refactor failed: {exc}")
            return
        if new_id is None:
            self._set_summary(f"Refactor of {proposal.id} declined")
            return
        self._record("refactor", proposal.id, f"superseded by {new_id}")
        self._refresh_view()

    def action_next(self) -> None:
        pending = self._pending()
        if pending:
            self._index = (self._index + 1) % len(pending)
            self._refresh_view()

    def action_previous(self) -> None:
        pending = self._pending()
        if pending:
            self._index = (self._index - 1) % len(pending)
            self._refresh_view()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "accept-btn":
            self.action_accept()
        elif event.button.id == "reject-btn":
            self.action_reject()
        elif event.button.id == "refactor-btn":
            self.action_refactor()


def run_review(controller: EditLifecycleController) -> list[tuple[str, str, str]]:
    """Run the review app until the user quits; return the decisions made."""
    app = ProposalReviewApp(controller)
    app.run()
    logger.info("[EditGate] Review session ended with %d decision(s)",
                len(app.decisions))
    return app.decisions
