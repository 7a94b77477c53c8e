"""Example: Feature a DAO and activate a module at a fixed SOL price"""

import sys

from dao_sdk import (
    DEVNET,
    FeaturedRecord,
    KeypairWallet,
    ModuleRecord,
    RpcClient,
    TransactionAssembler,
)
from dao_sdk.config import DEVNET_RPC_URL


def main(dao_id: str):
    client = RpcClient(DEVNET_RPC_URL)
    wallet = KeypairWallet.from_file(client)
    assembler = TransactionAssembler(DEVNET, client)

    # $100.00 per SOL, so every $20 fee is 0.2 SOL
    sol_price = 10000

    print("Featuring DAO...")
    built = assembler.feature_dao(wallet, FeaturedRecord(dao_id=dao_id), unit_price=sol_price)
    signature = wallet.sign_and_submit(built.transaction)
    print(f"Featured ID: {built.record_id}")
    print(f"Fee: {built.fee_lamports / 1_000_000_000} SOL")
    print(f"Transaction signature: {signature}")

    print("\nActivating POD module...")
    built = assembler.activate_module(
        wallet,
        ModuleRecord(dao_id=dao_id, module_type='POD'),
        unit_price=sol_price,
    )
    signature = wallet.sign_and_submit(built.transaction)
    print(f"Module ID: {built.record_id}")
    print(f"Transaction signature: {signature}")


if __name__ == '__main__':
    main(sys.argv[1])
