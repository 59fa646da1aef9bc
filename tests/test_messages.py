"""
Tests for storage message validation and name rules.
"""

import base64
import hashlib

import pytest

from greenfield_sdk.errors import GreenfieldInvalidMessageError, GreenfieldInvalidNameError
from greenfield_sdk.integrity import RedundancyType
from greenfield_sdk.messages import (
    MAX_UINT64,
    MsgCreateBucket,
    MsgCreateGroup,
    MsgCreateObject,
    MsgDeleteBucket,
    MsgDeletePolicy,
    MsgUpdateBucketInfo,
    MsgUpdateGroupMember,
    Principal,
    bucket_grn,
    group_grn,
    object_grn,
)
from greenfield_sdk.utils import (
    format_size,
    is_valid_address,
    verify_bucket_name,
    verify_group_name,
    verify_object_name,
)

from tests.conftest import TEST_ADDRESS, TEST_SP_ADDRESS

CHECKSUM = hashlib.sha256(b"piece").digest()


def create_object_msg(**overrides) -> MsgCreateObject:
    fields = {
        "creator": TEST_ADDRESS,
        "bucket_name": "my-bucket",
        "object_name": "docs/report.pdf",
        "payload_size": 10,
        "expect_checksums": [CHECKSUM] * 3,
    }
    fields.update(overrides)
    return MsgCreateObject(**fields)


class TestBucketNames:
    @pytest.mark.parametrize("name", ["abc", "my-bucket", "bucket.v2", "a" * 63, "123"])
    def test_valid(self, name):
        verify_bucket_name(name)

    @pytest.mark.parametrize(
        "name",
        [
            "ab",
            "a" * 64,
            "MyBucket",
            "my_bucket",
            "-bucket",
            "bucket-",
            "my..bucket",
            "my.-bucket",
            "my-.bucket",
            "192.168.1.1",
        ],
    )
    def test_invalid(self, name):
        with pytest.raises(GreenfieldInvalidNameError):
            verify_bucket_name(name)


class TestObjectNames:
    @pytest.mark.parametrize("name", ["a", "photos/2024/cat.jpg", "名前.txt", "x" * 1024])
    def test_valid(self, name):
        verify_object_name(name)

    @pytest.mark.parametrize("name", ["", "x" * 1025, "a//b", "../etc/passwd", "a/./b", "é" * 513])
    def test_invalid(self, name):
        with pytest.raises(GreenfieldInvalidNameError):
            verify_object_name(name)


class TestAddresses:
    def test_valid(self):
        assert is_valid_address(TEST_ADDRESS)
        assert is_valid_address("0X" + "A" * 40)

    @pytest.mark.parametrize("address", ["", "ab" * 20, "0x1234", "0x" + "g" * 40, None])
    def test_invalid(self, address):
        assert not is_valid_address(address)


class TestMsgCreateObject:
    def test_valid_message(self):
        create_object_msg().validate_basic()

    def test_empty_checksums(self):
        with pytest.raises(GreenfieldInvalidMessageError, match="cannot be empty"):
            create_object_msg(expect_checksums=[]).validate_basic()

    def test_short_checksum(self):
        with pytest.raises(GreenfieldInvalidMessageError, match="expected 32"):
            create_object_msg(expect_checksums=[CHECKSUM, b"\x00" * 31]).validate_basic()

    def test_negative_size(self):
        with pytest.raises(GreenfieldInvalidMessageError):
            create_object_msg(payload_size=-1).validate_basic()

    def test_bad_creator(self):
        with pytest.raises(GreenfieldInvalidMessageError, match="creator"):
            create_object_msg(creator="alice").validate_basic()

    def test_bad_secondary_sp(self):
        with pytest.raises(GreenfieldInvalidMessageError):
            create_object_msg(expect_secondary_sp_addresses=["0x12"]).validate_basic()

    def test_amino_json(self):
        msg = create_object_msg(redundancy_type=RedundancyType.REPLICA)
        data = msg.to_amino_json()

        assert data["@type"] == "/greenfield.storage.MsgCreateObject"
        assert data["expect_checksums"] == [base64.b64encode(CHECKSUM).decode("utf-8")] * 3
        assert data["redundancy_type"] == "REDUNDANCY_REPLICA_TYPE"
        assert data["payload_size"] == 10


class TestBucketMessages:
    def test_create_bucket_requires_primary_sp(self):
        msg = MsgCreateBucket(
            creator=TEST_ADDRESS, bucket_name="my-bucket", primary_sp_address="0x00"
        )
        with pytest.raises(GreenfieldInvalidMessageError, match="primary storage provider"):
            msg.validate_basic()

    def test_create_bucket_valid(self):
        msg = MsgCreateBucket(
            creator=TEST_ADDRESS,
            bucket_name="my-bucket",
            primary_sp_address=TEST_SP_ADDRESS,
            payment_address=TEST_ADDRESS,
        )
        msg.validate_basic()
        assert msg.to_amino_json()["@type"] == "/greenfield.storage.MsgCreateBucket"

    def test_delete_bucket_checks_name(self):
        with pytest.raises(GreenfieldInvalidNameError):
            MsgDeleteBucket(creator=TEST_ADDRESS, bucket_name="x").validate_basic()


class TestGroupNames:
    @pytest.mark.parametrize("name", ["abc", "Team Alpha", "g" * 63])
    def test_valid(self, name):
        verify_group_name(name)

    @pytest.mark.parametrize("name", ["", "ab", "g" * 64])
    def test_invalid(self, name):
        with pytest.raises(GreenfieldInvalidNameError):
            verify_group_name(name)


class TestUpdateBucketInfo:
    def test_valid(self):
        msg = MsgUpdateBucketInfo(
            creator=TEST_ADDRESS, bucket_name="my-bucket", read_quota=1024, payment_address=TEST_SP_ADDRESS
        )
        msg.validate_basic()
        assert msg.to_amino_json()["@type"] == "/greenfield.storage.MsgUpdateBucketInfo"

    @pytest.mark.parametrize("quota", [-1, MAX_UINT64 + 1])
    def test_quota_out_of_range(self, quota):
        msg = MsgUpdateBucketInfo(creator=TEST_ADDRESS, bucket_name="my-bucket", read_quota=quota)
        with pytest.raises(GreenfieldInvalidMessageError, match="Read quota"):
            msg.validate_basic()

    def test_bad_payment_address(self):
        msg = MsgUpdateBucketInfo(
            creator=TEST_ADDRESS, bucket_name="my-bucket", read_quota=0, payment_address="0x1"
        )
        with pytest.raises(GreenfieldInvalidMessageError, match="payment"):
            msg.validate_basic()


class TestGroupMessages:
    def test_create_group_checks_members(self):
        MsgCreateGroup(creator=TEST_ADDRESS, group_name="team", members=[TEST_SP_ADDRESS]).validate_basic()
        with pytest.raises(GreenfieldInvalidMessageError, match="group member"):
            MsgCreateGroup(creator=TEST_ADDRESS, group_name="team", members=["bob"]).validate_basic()

    def test_update_member_requires_changes(self):
        msg = MsgUpdateGroupMember(creator=TEST_ADDRESS, group_name="team")
        with pytest.raises(GreenfieldInvalidMessageError, match="No group members"):
            msg.validate_basic()

    def test_update_member_short_group_name(self):
        msg = MsgUpdateGroupMember(
            creator=TEST_ADDRESS, group_name="", members_to_add=[TEST_SP_ADDRESS]
        )
        with pytest.raises(GreenfieldInvalidNameError):
            msg.validate_basic()


class TestDeletePolicy:
    def test_resource_names(self):
        assert bucket_grn("my-bucket") == "grn:b::my-bucket"
        assert object_grn("my-bucket", "a/b.txt") == "grn:o::my-bucket/a/b.txt"
        assert group_grn(TEST_ADDRESS, "team") == f"grn:g:{TEST_ADDRESS}::team"

    def test_amino_json_uses_operator(self):
        msg = MsgDeletePolicy(
            creator=TEST_ADDRESS,
            resource=bucket_grn("my-bucket"),
            principal=Principal(value=TEST_SP_ADDRESS),
        )
        msg.validate_basic()
        data = msg.to_amino_json()

        assert data["operator"] == TEST_ADDRESS
        assert "creator" not in data
        assert data["principal"] == {"type": "PRINCIPAL_TYPE_GNFD_ACCOUNT", "value": TEST_SP_ADDRESS}

    def test_invalid_resource(self):
        msg = MsgDeletePolicy(
            creator=TEST_ADDRESS, resource="my-bucket", principal=Principal(value=TEST_SP_ADDRESS)
        )
        with pytest.raises(GreenfieldInvalidMessageError, match="resource"):
            msg.validate_basic()

    def test_invalid_principal(self):
        msg = MsgDeletePolicy(
            creator=TEST_ADDRESS, resource=bucket_grn("my-bucket"), principal=Principal(value="0x")
        )
        with pytest.raises(GreenfieldInvalidMessageError, match="principal"):
            msg.validate_basic()


def test_format_size():
    assert format_size(512) == "512 bytes"
    assert format_size(2048) == "2.00 KB"
    assert format_size(16 * 1024 * 1024) == "16.00 MB"
    assert format_size(3 * 1024 ** 3) == "3.00 GB"
