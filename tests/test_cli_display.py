import logging
import os

from edit_gate.cli_display import (
    C_GREEN, C_RED, C_RESET, format_colored_diff, format_proposal,
    format_proposal_line, format_status, setup_logger, vis_len,
)
from edit_gate.proposals.controller import EditLifecycleController
from edit_gate.proposals.models import ProposalStatus


def _controller(tmp_path):
    ws = tmp_path / "ws"
    ws.mkdir()
    return EditLifecycleController(str(ws), data_dir=str(tmp_path / "data"))


def test_colored_diff():
    colored = format_colored_diff("+added\n-removed\n context")
    lines = colored.splitlines()
    assert lines[0] == f"{C_GREEN}+added{C_RESET}"
    assert lines[1] == f"{C_RED}-removed{C_RESET}"
    assert lines[2] == " context"


def test_vis_len_ignores_ansi():
    assert vis_len(f"{C_GREEN}abc{C_RESET}") == 3


def test_format_status_plain():
    assert format_status(ProposalStatus.APPLIED, color=False) == "✔ applied"


def test_format_proposal_plain(tmp_path):
    controller = _controller(tmp_path)
    proposal_id = controller.propose_full_write("a.txt", "hello\n")
    text = format_proposal(controller.get_proposal(proposal_id), color=False)
    assert text.splitlines()[0] == f"{proposal_id}  ○ pending"
    assert "Create/modify file: a.txt" in text
    assert "+hello" in text
    assert "\033[" not in text


def test_format_proposal_line(tmp_path):
    controller = _controller(tmp_path)
    proposal_id = controller.propose_command("echo hi")
    line = format_proposal_line(controller.get_proposal(proposal_id), color=False)
    assert proposal_id in line
    assert "command_execution" in line
    assert "echo hi" in line


def test_setup_logger_writes_file(tmp_path):
    log_dir = tmp_path / "logs"
    logger = setup_logger(str(log_dir))
    try:
        logging.getLogger("edit_gate.cli").info("[EditGate] hello log")
        for handler in logger.handlers:
            handler.flush()
        files = os.listdir(log_dir)
        assert len(files) == 1
        content = (log_dir / files[0]).read_text(encoding="utf-8")
        assert "hello log" in content
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
