"""Merchant/branch scope passed explicitly through every operation."""

from dataclasses import dataclass


@dataclass(frozen=True)
class BranchScope:
    """A single branch of a merchant account."""
    merchant_id: str
    branch_id: str

    def __post_init__(self):
        if not self.merchant_id or not self.branch_id:
            raise ValueError("merchant_id and branch_id are required")

    @classmethod
    def parse(cls, value: str) -> "BranchScope":
        """Parse a ``merchantId/branchId`` string."""
        merchant_id, _, branch_id = value.partition("/")
        return cls(merchant_id.strip(), branch_id.strip())

    @property
    def path(self) -> str:
        return f"merchants/{self.merchant_id}/branches/{self.branch_id}"

    def as_filter(self) -> dict:
        """MongoDB filter matching documents of this branch."""
        return {"merchantId": self.merchant_id, "branchId": self.branch_id}

    def __str__(self) -> str:
        return self.path
