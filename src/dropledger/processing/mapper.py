"""Pure mapping from decoded events to ledger records.

No I/O here: handlers read whatever prior state a mapping needs (the
activity row) inside their transaction and pass it in.
"""

from __future__ import annotations

from dropledger.models.events import (
    ActivityAddEvent,
    ActivityFinishEvent,
    ContractEvent,
    CreateNftEvent,
    DropEvent,
    TransferEvent,
)
from dropledger.models.records import (
    ACTIVITY_STATUS_OPEN,
    DROP_TYPE_BUSINESS,
    DROP_TYPE_RECIPIENT,
    TRANSFER_DESCRIPTION,
    AccountNftUpdate,
    ActivityInfo,
    DropInfo,
    DropWriteSet,
    NftTier,
    TokenNft,
    TokenReceived,
    TokenSent,
)


def map_activity_add(
    decoded: ActivityAddEvent, event: ContractEvent,
) -> tuple[ActivityInfo, TokenSent]:
    """New activity plus the merchant's escrow commitment (max drop × drops)."""
    info = ActivityInfo(
        activity_id=decoded.activity_id,
        business_name=decoded.business_name,
        business_account=decoded.who,
        activity_content=decoded.activity_content,
        latitude_longitude=decoded.latitude_longitude,
        activity_create_time=event.timestamp,
        activity_deadline=decoded.activity_deadline,
        drop_type=decoded.drop_type,
        drop_number=decoded.drop_number,
        min_drop_amt=decoded.min_drop_amt,
        max_drop_amt=decoded.max_drop_amt,
        token_contract_addr=decoded.token_contract_addr,
        activity_status=ACTIVITY_STATUS_OPEN,
        already_drop_number=0,
        return_amount=0,
        mined_amount=0,
    )
    escrow = TokenSent(
        address=info.business_account,
        token_address=info.token_contract_addr,
        amount=decoded.max_drop_amt * decoded.drop_number,
        description=decoded.activity_content,
        timestamp=event.timestamp,
    )
    return info, escrow


def map_activity_finish(
    decoded: ActivityFinishEvent, event: ContractEvent, activity: ActivityInfo,
) -> TokenReceived:
    """Refund of the unspent escrow back to the merchant."""
    return TokenReceived(
        address=activity.business_account,
        token_address=activity.token_contract_addr,
        amount=decoded.return_amount,
        description=activity.activity_content,
        timestamp=event.timestamp,
    )


def map_mint_nft(
    decoded: CreateNftEvent, event: ContractEvent,
) -> tuple[TokenNft, AccountNftUpdate]:
    token = TokenNft(
        token_id=decoded.token_id,
        who=decoded.creator,
        business_name=decoded.business_name,
        description=decoded.description,
        img_url=decoded.img_url,
        business_address=decoded.business_address,
        website=decoded.website,
        social=decoded.social,
        contract_address=event.contract_address,
        cost_value=decoded.value,
        deadline=decoded.deadline,
        nft_type=decoded.nft_type,
    )
    update = AccountNftUpdate(
        address=decoded.creator,
        tier=NftTier.from_type(decoded.nft_type),
        deadline=decoded.deadline,
    )
    return token, update


def map_drop(
    decoded: DropEvent, event: ContractEvent, activity: ActivityInfo,
) -> DropWriteSet:
    """Recipient leg, business leg and the recipient's credit for one drop."""
    recipient_leg = DropInfo(
        address=decoded.who,
        drop_amount=decoded.drop_amt,
        activity_id=decoded.activity_id,
        drop_type=DROP_TYPE_RECIPIENT,
        timestamp=event.timestamp,
        transaction_hash=event.transaction_hash,
        event_signature=event.event_signature,
    )
    business_leg = DropInfo(
        address=activity.business_account,
        drop_amount=decoded.drop_amt,
        activity_id=decoded.activity_id,
        drop_type=DROP_TYPE_BUSINESS,
        timestamp=event.timestamp,
        transaction_hash=event.transaction_hash,
        event_signature=event.event_signature,
    )
    credit = TokenReceived(
        address=decoded.who,
        token_address=activity.token_contract_addr,
        amount=decoded.drop_amt,
        description=activity.activity_content,
        timestamp=event.timestamp,
    )
    return DropWriteSet(recipient_leg, business_leg, credit)


def map_transfer(
    decoded: TransferEvent, event: ContractEvent, platform_address: str,
) -> tuple[TokenSent, TokenReceived] | None:
    """ERC20 transfer legs, or None when the platform contract is an endpoint."""
    platform = platform_address.lower()
    if decoded.sender.lower() == platform or decoded.recipient.lower() == platform:
        return None

    token_address = event.log.address
    sent = TokenSent(
        address=decoded.sender,
        token_address=token_address,
        amount=decoded.value,
        description=TRANSFER_DESCRIPTION,
        timestamp=event.timestamp,
    )
    received = TokenReceived(
        address=decoded.recipient,
        token_address=token_address,
        amount=decoded.value,
        description=TRANSFER_DESCRIPTION,
        timestamp=event.timestamp,
    )
    return sent, received
