"""Functions behind the gardenctl commands."""

from gardenctl.shared.base_functions import function_registry
from gardenctl.shared.functions.drop import DropFunction
from gardenctl.shared.functions.history import HistoryFunction
from gardenctl.shared.functions.info import (
    GetFunction,
    GetTargetFunction,
    KubeconfigFunction,
)
from gardenctl.shared.functions.kubectl import KubectlFunction
from gardenctl.shared.functions.ls import LsFunction
from gardenctl.shared.functions.target import TargetFunction


def initialize_functions():
    """Initialize and register all available functions."""

    function_registry.register(TargetFunction())
    function_registry.register(DropFunction())
    function_registry.register(LsFunction())
    function_registry.register(GetTargetFunction())
    function_registry.register(KubeconfigFunction())
    function_registry.register(HistoryFunction())
    function_registry.register(GetFunction())
    function_registry.register(KubectlFunction())
