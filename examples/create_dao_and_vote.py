"""Example: Create a DAO, open a proposal and vote on it"""

import time

from dao_sdk import (
    DEVNET,
    CoinGeckoPriceFeed,
    DaoRecord,
    KeypairWallet,
    ProposalRecord,
    RpcClient,
    TransactionAssembler,
    VoteRecord,
)
from dao_sdk.config import DEVNET_RPC_URL


def main():
    # Initialize client
    client = RpcClient(DEVNET_RPC_URL)

    # Load the payer from ~/.config/solana/id.json
    wallet = KeypairWallet.from_file(client)
    print(f"Using wallet: {wallet.public_key}")
    print(f"Wallet balance: {client.get_balance(wallet.public_key) / 1_000_000_000} SOL")

    assembler = TransactionAssembler(DEVNET, client, price_feed=CoinGeckoPriceFeed())

    # Create the DAO
    print("Creating DAO...")
    built = assembler.create_dao(
        wallet,
        DaoRecord(
            name='My DAO',
            description='A description of my DAO',
            discord='https://discord.gg/mydao',
            twitter='https://twitter.com/mydao',
            telegram='https://t.me/mydao',
            instagram='https://instagram.com/mydao',
            tiktok='https://tiktok.com/@mydao',
            website='https://mydao.org',
            treasury='treasury_account_pubkey',
            profile='profile_url',
            token_address='token_address',
        ),
    )
    print(f"SOL price: {built.unit_price} cents, fee: {built.fee_lamports} lamports")
    signature = wallet.sign_and_submit(built.transaction)
    print(f"DAO ID: {built.record_id}")
    print(f"Transaction signature: {signature}")

    # Open a proposal starting in a minute, running for a week
    print("\nCreating proposal...")
    start = int(time.time()) + 60
    proposal = ProposalRecord(
        name='My Proposal',
        description='A description of my proposal',
        dao_id=built.record_id,
        start_time=start,
        end_time=start + 7 * 24 * 60 * 60,
    )
    proposal.check_schedule()
    built = assembler.create_proposal(wallet, proposal)
    signature = wallet.sign_and_submit(built.transaction)
    print(f"Proposal ID: {built.record_id}")
    print(f"Transaction signature: {signature}")

    # Vote
    print("\nVoting...")
    built = assembler.vote(wallet, VoteRecord(vote_value='for', proposal_id=built.record_id))
    signature = wallet.sign_and_submit(built.transaction)
    print(f"Vote ID: {built.record_id}")
    print(f"Transaction signature: {signature}")

    status = client.confirm(signature)
    print(f"Vote confirmed: {status.confirmed}")


if __name__ == '__main__':
    main()
