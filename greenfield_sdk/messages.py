"""
Storage module messages for the Greenfield chain.

Each message is a pydantic model with a validate_basic() check mirroring the
chain's stateless validation, so malformed requests fail before they are
signed and broadcast.
"""

import base64
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field

from greenfield_sdk.errors import GreenfieldInvalidMessageError
from greenfield_sdk.integrity import HASH_SIZE, RedundancyType
from greenfield_sdk.utils import (
    is_valid_address,
    verify_bucket_name,
    verify_group_name,
    verify_object_name,
)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
PRINCIPAL_TYPE_ACCOUNT = "PRINCIPAL_TYPE_GNFD_ACCOUNT"
MAX_UINT64 = 2**64 - 1


def _check_address(address: Optional[str], field: str) -> None:
    if not address or not is_valid_address(address):
        raise GreenfieldInvalidMessageError(f"Invalid {field} address: {address!r}")


class TxOption(BaseModel):
    """Options handed to the broadcaster along with the messages."""

    gas_limit: Optional[int] = None
    fee_amount: Optional[str] = None
    memo: str = ""


class TxResponse(BaseModel):
    """Result of a broadcast transaction."""

    txn_hash: str
    txn_type: str


class Msg(BaseModel):
    """Base class for storage messages signed by `creator`."""

    type_url: ClassVar[str] = ""
    txn_type: ClassVar[str] = ""

    creator: str

    def validate_basic(self) -> None:
        """
        Raises:
            GreenfieldInvalidMessageError: If the message is malformed
            GreenfieldInvalidNameError: If a bucket or object name is invalid
        """
        _check_address(self.creator, "creator")

    def to_amino_json(self) -> Dict[str, Any]:
        return {"@type": self.type_url, **self.model_dump(mode="json")}


class MsgCreateBucket(Msg):
    type_url: ClassVar[str] = "/greenfield.storage.MsgCreateBucket"
    txn_type: ClassVar[str] = "CreateBucket"

    bucket_name: str
    is_public: bool = False
    primary_sp_address: str
    payment_address: Optional[str] = None
    read_quota: int = 0

    def validate_basic(self) -> None:
        super().validate_basic()
        verify_bucket_name(self.bucket_name)
        _check_address(self.primary_sp_address, "primary storage provider")
        if self.payment_address is not None:
            _check_address(self.payment_address, "payment")
        if self.read_quota < 0:
            raise GreenfieldInvalidMessageError("Read quota cannot be negative")


class MsgDeleteBucket(Msg):
    type_url: ClassVar[str] = "/greenfield.storage.MsgDeleteBucket"
    txn_type: ClassVar[str] = "DeleteBucket"

    bucket_name: str

    def validate_basic(self) -> None:
        super().validate_basic()
        verify_bucket_name(self.bucket_name)


class _ObjectMsg(Msg):
    bucket_name: str
    object_name: str

    def validate_basic(self) -> None:
        super().validate_basic()
        verify_bucket_name(self.bucket_name)
        verify_object_name(self.object_name)


class MsgCreateObject(_ObjectMsg):
    type_url: ClassVar[str] = "/greenfield.storage.MsgCreateObject"
    txn_type: ClassVar[str] = "CreateObject"

    payload_size: int
    is_public: bool = False
    content_type: str = DEFAULT_CONTENT_TYPE
    expect_checksums: List[bytes]
    redundancy_type: RedundancyType = RedundancyType.EC
    expect_secondary_sp_addresses: List[str] = Field(default_factory=list)

    def validate_basic(self) -> None:
        super().validate_basic()
        if self.payload_size < 0:
            raise GreenfieldInvalidMessageError("Payload size cannot be negative")
        if not self.expect_checksums:
            raise GreenfieldInvalidMessageError("Expected checksums cannot be empty")
        for index, checksum in enumerate(self.expect_checksums):
            if len(checksum) != HASH_SIZE:
                raise GreenfieldInvalidMessageError(
                    f"Checksum {index} has {len(checksum)} bytes, expected {HASH_SIZE}"
                )
        for address in self.expect_secondary_sp_addresses:
            _check_address(address, "secondary storage provider")

    def to_amino_json(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json", exclude={"expect_checksums"})
        data["expect_checksums"] = [
            base64.b64encode(checksum).decode("utf-8")
            for checksum in self.expect_checksums
        ]
        return {"@type": self.type_url, **data}


class MsgCancelCreateObject(_ObjectMsg):
    type_url: ClassVar[str] = "/greenfield.storage.MsgCancelCreateObject"
    txn_type: ClassVar[str] = "CancelCreateObject"


class MsgDeleteObject(_ObjectMsg):
    type_url: ClassVar[str] = "/greenfield.storage.MsgDeleteObject"
    txn_type: ClassVar[str] = "DeleteObject"


class MsgUpdateBucketInfo(Msg):
    """Updates a bucket's charged read quota and payment account."""

    type_url: ClassVar[str] = "/greenfield.storage.MsgUpdateBucketInfo"
    txn_type: ClassVar[str] = "UpdateBucketInfo"

    bucket_name: str
    read_quota: int
    payment_address: Optional[str] = None

    def validate_basic(self) -> None:
        super().validate_basic()
        verify_bucket_name(self.bucket_name)
        if not 0 <= self.read_quota <= MAX_UINT64:
            raise GreenfieldInvalidMessageError(
                f"Read quota must be between 0 and {MAX_UINT64}, got {self.read_quota}"
            )
        if self.payment_address is not None:
            _check_address(self.payment_address, "payment")


class _GroupMsg(Msg):
    group_name: str

    def validate_basic(self) -> None:
        super().validate_basic()
        verify_group_name(self.group_name)


class MsgCreateGroup(_GroupMsg):
    type_url: ClassVar[str] = "/greenfield.storage.MsgCreateGroup"
    txn_type: ClassVar[str] = "CreateGroup"

    members: List[str] = Field(default_factory=list)

    def validate_basic(self) -> None:
        super().validate_basic()
        for member in self.members:
            _check_address(member, "group member")


class MsgDeleteGroup(_GroupMsg):
    type_url: ClassVar[str] = "/greenfield.storage.MsgDeleteGroup"
    txn_type: ClassVar[str] = "DeleteGroup"


class MsgUpdateGroupMember(_GroupMsg):
    type_url: ClassVar[str] = "/greenfield.storage.MsgUpdateGroupMember"
    txn_type: ClassVar[str] = "UpdateGroupMember"

    members_to_add: List[str] = Field(default_factory=list)
    members_to_delete: List[str] = Field(default_factory=list)

    def validate_basic(self) -> None:
        super().validate_basic()
        if not self.members_to_add and not self.members_to_delete:
            raise GreenfieldInvalidMessageError("No group members to add or delete")
        for member in self.members_to_add + self.members_to_delete:
            _check_address(member, "group member")


def bucket_grn(bucket_name: str) -> str:
    """Resource name of a bucket, as used by permission policies."""
    return f"grn:b::{bucket_name}"


def object_grn(bucket_name: str, object_name: str) -> str:
    return f"grn:o::{bucket_name}/{object_name}"


def group_grn(owner_address: str, group_name: str) -> str:
    return f"grn:g:{owner_address}::{group_name}"


class Principal(BaseModel):
    """The account a permission policy applies to."""

    type: str = PRINCIPAL_TYPE_ACCOUNT
    value: str


class MsgDeletePolicy(Msg):
    """Removes the policy `principal` holds on `resource`. Signed by the resource owner."""

    type_url: ClassVar[str] = "/greenfield.storage.MsgDeletePolicy"
    txn_type: ClassVar[str] = "DeletePolicy"

    resource: str
    principal: Principal

    def validate_basic(self) -> None:
        super().validate_basic()
        if not self.resource.startswith(("grn:b::", "grn:o::", "grn:g:")):
            raise GreenfieldInvalidMessageError(f"Invalid resource name: {self.resource!r}")
        _check_address(self.principal.value, "principal")

    def to_amino_json(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json")
        data["operator"] = data.pop("creator")
        return {"@type": self.type_url, **data}
