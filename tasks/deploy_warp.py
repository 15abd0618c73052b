"""
Deploy Warp
Builds and stores warp-account and warp-controller, then instantiates warp-controller
"""

from typing import Dict
from loguru import logger

from . import task


def build_instantiate_msg(warp_account_code_id: int) -> Dict:
    """warp-controller instantiate message; everything but the code id is fixed"""
    return {
        'warp_account_code_id': warp_account_code_id,
        'creation_fee': "5",
        'cancellation_fee': "5",
        'minimum_reward': "10000",
        'template_fee': "10000000",
        't_max': "86400",
        't_min': "86400",
        'a_max': "10000",
        'a_min': "10000",
        'q_max': "10"
    }


@task
async def deploy_warp(ctx):
    deployer, signer, refs = ctx.deployer, ctx.signer, ctx.refs

    # account
    # only stored: accounts are created by warp-controller, never instantiated here
    await deployer.build_contract("warp-account")
    await deployer.optimize_contract("warp-account")

    account_code_id = await deployer.store_code("warp-account")
    await deployer.wait_for_code(account_code_id)

    # controller
    await deployer.build_contract("warp-controller")
    await deployer.optimize_contract("warp-controller")

    controller_code_id = await deployer.store_code("warp-controller")
    await deployer.wait_for_code(controller_code_id)

    instantiate_msg = build_instantiate_msg(account_code_id)

    result = await deployer.instantiate(
        "warp-controller",
        instantiate_msg,
        admin=signer.key.acc_address
    )

    refs.save_refs()

    logger.success(f"warp-controller deployed at {result['address']}")
    return result
