from abc import ABC, abstractmethod

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from amm_positions.exceptions import InvalidTokenId, Unauthorized


class Authorizer(ABC):
    """
    Decides whether a caller may manage a position.  The ledger asks the authorizer before every decrease,
    collect and close, and notifies it when positions are opened and closed.
    """

    @abstractmethod
    def is_authorized(self, caller: ChecksumAddress, token_id: int) -> bool:
        """Returns True if caller may decrease, collect or close the position"""

    def position_opened(self, token_id: int, owner: ChecksumAddress) -> None:
        """Called after a position is opened on behalf of owner"""

    def position_closed(self, token_id: int) -> None:
        """Called after a position is closed"""


class OwnerAuthorizer(Authorizer):
    """
    Tracks the owner of every open position, along with single-position approvals and owner-wide operators.
    A caller is authorized if it owns the position, is approved for it, or is an operator of the owner.
    Approvals are cleared when the position is closed.
    """

    def __init__(self):
        self.owners: dict[int, ChecksumAddress] = {}
        self.approvals: dict[int, ChecksumAddress] = {}
        self.operators: dict[ChecksumAddress, set[ChecksumAddress]] = {}

    def owner_of(self, token_id: int) -> ChecksumAddress:
        try:
            return self.owners[token_id]
        except KeyError:
            raise InvalidTokenId(f"Position {token_id} does not exist")  # pylint: disable=raise-missing-from

    def approve(self, owner: ChecksumAddress, spender: ChecksumAddress, token_id: int):
        """Approves spender to manage a single position.  Only the owner may approve"""
        if self.owner_of(token_id) != to_checksum_address(owner):
            raise Unauthorized(f"{owner} is not the owner of position {token_id}")
        self.approvals[token_id] = to_checksum_address(spender)

    def set_approval_for_all(self, owner: ChecksumAddress, operator: ChecksumAddress, approved: bool):
        """Grants or revokes operator control over every position held by owner"""
        operators = self.operators.setdefault(to_checksum_address(owner), set())
        if approved:
            operators.add(to_checksum_address(operator))
        else:
            operators.discard(to_checksum_address(operator))

    def is_authorized(self, caller: ChecksumAddress, token_id: int) -> bool:
        owner = self.owner_of(token_id)
        caller = to_checksum_address(caller)
        return (
            caller == owner
            or self.approvals.get(token_id) == caller
            or caller in self.operators.get(owner, set())
        )

    def position_opened(self, token_id: int, owner: ChecksumAddress) -> None:
        self.owners[token_id] = to_checksum_address(owner)

    def position_closed(self, token_id: int) -> None:
        self.owners.pop(token_id, None)
        self.approvals.pop(token_id, None)
