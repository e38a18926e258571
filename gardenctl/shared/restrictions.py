"""Access restriction warnings shown when targeting a shoot."""

from typing import List, Sequence

from gardenctl.shared.config import AccessRestriction
from gardenctl.shared.providers.base import ShootInfo


def _flag(value: bool) -> str:
    return "true" if value else "false"


def access_restriction_warnings(
    shoot: ShootInfo, restrictions: Sequence[AccessRestriction]
) -> List[str]:
    """Messages of the restrictions that apply to ``shoot``.

    A restriction applies when the shoot's seed selector carries its key with
    the ``notifyIf`` value. Options are only checked for applying restrictions
    and match on the shoot's annotations.
    """

    warnings: List[str] = []
    labels = shoot.seed_selector_labels
    if not labels or not restrictions:
        return warnings

    for restriction in restrictions:
        if labels.get(restriction.key) != _flag(restriction.notify_if):
            continue
        warnings.append(restriction.msg)
        for option in restriction.options:
            if shoot.annotations.get(option.key) == _flag(option.notify_if):
                warnings.append(option.msg)
    return warnings
