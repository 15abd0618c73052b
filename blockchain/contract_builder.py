"""
Contract Builder
Compiles CosmWasm contracts and optimizes the resulting wasm
"""

import os
import shutil
import asyncio
from typing import List, Optional
from loguru import logger


WASM_TARGET = "wasm32-unknown-unknown"
DEFAULT_OPTIMIZER_IMAGE = "cosmwasm/rust-optimizer:0.12.6"


class BuildError(Exception):
    """Raised when a build or optimize command exits non-zero"""


class ContractBuilder:
    """
    Builds contracts from contracts/<name> with cargo and
    optimizes them with the rust-optimizer docker image
    """

    def __init__(
        self,
        contracts_dir: str = "contracts",
        artifacts_dir: str = "artifacts",
        optimizer_image: str = DEFAULT_OPTIMIZER_IMAGE
    ):
        """
        Initialize Contract Builder

        Args:
            contracts_dir: Directory holding one sub-directory per contract
            artifacts_dir: Where optimized wasm files are collected
            optimizer_image: Docker image used for optimization
        """
        self.contracts_dir = contracts_dir
        self.artifacts_dir = artifacts_dir
        self.optimizer_image = optimizer_image

    def contract_dir(self, name: str) -> str:
        path = os.path.join(self.contracts_dir, name)

        if not os.path.isdir(path):
            raise FileNotFoundError(f"Contract directory not found: {path}")

        return path

    def artifact_path(self, name: str) -> str:
        """Optimized wasm path for a contract (dashes become underscores)"""
        return os.path.join(self.artifacts_dir, f"{name.replace('-', '_')}.wasm")

    async def build(self, name: str):
        """
        Compile contract to wasm

        Args:
            name: Contract name, e.g. "warp-account"
        """
        cwd = self.contract_dir(name)

        logger.info(f"Building {name}...")
        await self._run(
            ["cargo", "build", "--release", "--target", WASM_TARGET, "--lib"],
            cwd=cwd
        )
        logger.success(f"Built {name}")

    def workspace_dir(self) -> str:
        """Cargo workspace root: the parent of contracts_dir"""
        return os.path.dirname(os.path.abspath(self.contracts_dir))

    async def optimize(self, name: str) -> str:
        """
        Optimize built contract and copy it into artifacts_dir

        The whole workspace is mounted so path dependencies under
        packages/ resolve inside the container.

        Args:
            name: Contract name

        Returns:
            Path to optimized wasm
        """
        workspace = self.workspace_dir()
        contract = os.path.relpath(os.path.abspath(self.contract_dir(name)), workspace)
        snake_name = name.replace('-', '_')

        logger.info(f"Optimizing {name}...")
        await self._run(
            [
                "docker", "run", "--rm",
                "-v", f"{workspace}:/code",
                "--mount", f"type=volume,source={os.path.basename(workspace)}_cache,target=/code/target",
                "--mount", "type=volume,source=registry_cache,target=/usr/local/cargo/registry",
                self.optimizer_image,
                f"./{contract}"
            ],
            cwd=workspace
        )

        optimized = os.path.join(workspace, "artifacts", f"{snake_name}.wasm")
        if not os.path.isfile(optimized):
            raise BuildError(f"Optimized wasm not found at {optimized}")

        os.makedirs(self.artifacts_dir, exist_ok=True)
        dest = self.artifact_path(name)
        if not os.path.exists(dest) or not os.path.samefile(optimized, dest):
            shutil.copy2(optimized, dest)

        logger.success(f"Optimized {name} -> {dest} ({os.path.getsize(dest):,} bytes)")
        return dest

    async def _run(self, cmd: List[str], cwd: Optional[str] = None) -> str:
        """
        Run a command, raising BuildError on non-zero exit

        Returns:
            Combined stdout/stderr
        """
        logger.debug(f"  > {' '.join(cmd)}")

        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT
        )
        stdout, _ = await process.communicate()
        output = stdout.decode(errors='replace') if stdout else ''

        if process.returncode != 0:
            raise BuildError(
                f"Command failed ({process.returncode}): {' '.join(cmd)}\n{output}"
            )

        return output
