"""
Conflict resolution for script uploads

Before a batch is uploaded every script that may have changed on the server
(or whose server state is unknown) needs an explicit go-ahead.  The answer
can be remembered for the rest of the batch, so the questions are asked in
input order, one at a time.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.script import Script
from ..utils.logging import log, vlog
from .prompt import Prompt

FORCE_UPLOAD_YES = "Yes"
FORCE_UPLOAD_NO = "No"
FORCE_UPLOAD_ALL = "Yes (remember my answer for this operation)"
FORCE_UPLOAD_NONE = "No (remember my answer for this operation)"


class Decision(str, Enum):
    NO_CONFLICT = "no_conflict"
    UPLOAD_FORCED = "upload_forced"
    UPLOAD_DENIED = "upload_denied"
    APPLIED_ALL = "applied_all"
    APPLIED_NONE = "applied_none"


@dataclass
class BatchPolicy:
    """Remembered answer for the remainder of one batch.  Only ever latches on."""

    all_remaining: bool = False
    none_remaining: bool = False


_ANSWERS = {
    FORCE_UPLOAD_YES: Decision.UPLOAD_FORCED,
    FORCE_UPLOAD_NO: Decision.UPLOAD_DENIED,
    FORCE_UPLOAD_ALL: Decision.APPLIED_ALL,
    FORCE_UPLOAD_NONE: Decision.APPLIED_NONE,
}


def question_for(script: Script) -> str:
    if script.last_sync_hash:
        return f"{script.name} has been changed on server, upload anyway?"
    return f"{script.name} might have been changed on server, upload anyway?"


def choices_for(single_script: bool) -> list[str]:
    if single_script:
        return [FORCE_UPLOAD_YES, FORCE_UPLOAD_NO]
    return [FORCE_UPLOAD_YES, FORCE_UPLOAD_NO, FORCE_UPLOAD_ALL, FORCE_UPLOAD_NONE]


def decision_for_answer(answer: Optional[str]) -> Decision:
    """Map a prompt answer to a decision; a dismissed prompt means 'No, remember'."""
    return _ANSWERS.get(answer, Decision.APPLIED_NONE)


def resolve(script: Script, policy: BatchPolicy, single_script: bool,
            prompt: Prompt) -> Decision:
    """
    Decide what to do with one script.  Does not touch *script* or *policy*;
    the caller applies the decision.

    The prompt is only called when the script is unresolved and no answer
    has been remembered for this batch.
    """
    if not script.conflict_mode:
        return Decision.NO_CONFLICT
    if not script.conflict and script.last_sync_hash:
        return Decision.NO_CONFLICT
    if policy.all_remaining:
        return Decision.APPLIED_ALL
    if policy.none_remaining:
        return Decision.APPLIED_NONE

    answer = prompt(question_for(script), choices_for(single_script))
    return decision_for_answer(answer)


def ensure_force_upload(scripts: list[Script],
                        prompt: Prompt) -> tuple[list[Script], list[Script]]:
    """
    Ask for every unresolved script whether it should overwrite the server
    copy.

    Returns (no_conflict, force_upload).  Scripts the user declined are in
    neither list.  Approved scripts get force_upload=True and conflict=False
    so their new hash can be recorded after the upload.
    """
    no_conflict: list[Script] = []
    force_upload: list[Script] = []
    policy = BatchPolicy()
    single_script = len(scripts) == 1

    for script in scripts:
        decision = resolve(script, policy, single_script, prompt)

        if decision is Decision.NO_CONFLICT:
            no_conflict.append(script)
            vlog(f"  [NO-CONFLICT] {script.name}")
        elif decision in (Decision.UPLOAD_FORCED, Decision.APPLIED_ALL):
            script.force_upload = True
            script.conflict = False
            force_upload.append(script)
            if decision is Decision.APPLIED_ALL:
                policy.all_remaining = True
            log(f"  [FORCE] {script.name}")
        elif decision is Decision.APPLIED_NONE:
            policy.none_remaining = True
            log(f"  [SKIP] {script.name}")
        else:
            log(f"  [SKIP] {script.name}")

    return no_conflict, force_upload
