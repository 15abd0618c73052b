"""
Deployment Tasks
Each module registers one async task with @task; main.py runs it by name
"""

import importlib
from typing import Awaitable, Callable, Dict
from loguru import logger


_registry: Dict[str, Callable[..., Awaitable]] = {}


class TaskContext:
    """Collaborators handed to a task at run time"""

    def __init__(self, deployer, signer, refs, network: str):
        self.deployer = deployer
        self.signer = signer
        self.refs = refs
        self.network = network


def task(fn: Callable[..., Awaitable]) -> Callable[..., Awaitable]:
    """Register an async task under its module's short name"""
    name = fn.__module__.rsplit('.', 1)[-1]
    _registry[name] = fn
    logger.debug(f"Registered task: {name}")
    return fn


def get_task(name: str) -> Callable[..., Awaitable]:
    """
    Import tasks.<name> and return its registered task

    Args:
        name: Task module name, e.g. "deploy_warp"
    """
    if name not in _registry:
        try:
            importlib.import_module(f"{__name__}.{name}")
        except ModuleNotFoundError as e:
            if e.name != f"{__name__}.{name}":
                raise
            raise ValueError(f"Unknown task: {name}") from e

    if name not in _registry:
        raise ValueError(f"Module tasks.{name} does not register a task")

    return _registry[name]
