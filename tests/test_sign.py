"""签名模块单元测试。"""

import hashlib
import hmac
import re

from wxpay.models.schemas import SignType
from wxpay.services.sign import (
    NONCE_ALPHABET,
    build_sign_string,
    generate_nonce_str,
    generate_sign,
    verify_sign,
)


class TestBuildSignString:
    """build_sign_string 单元测试。"""

    def test_known_string(self):
        params = {"total_fee": "101", "appid": "wxabc", "out_trade_no": "123"}
        assert (
            build_sign_string(params, "testkey123456789")
            == "appid=wxabc&out_trade_no=123&total_fee=101&key=testkey123456789"
        )

    def test_excludes_sign_and_empty_values(self):
        params = {"b": "2", "a": "1", "c": "", "sign": "ABC"}
        assert build_sign_string(params, "k") == "a=1&b=2&key=k"

    def test_sign_type_is_signed(self):
        """sign_type 参与签名，只排除 sign。"""
        params = {"a": "1", "sign_type": "MD5"}
        assert build_sign_string(params, "k") == "a=1&sign_type=MD5&key=k"

    def test_only_key_when_empty(self):
        assert build_sign_string({}, "k") == "key=k"

    def test_byte_order_uppercase_first(self):
        params = {"b": "1", "B": "2", "a": "3"}
        assert build_sign_string(params, "k") == "B=2&a=3&b=1&key=k"


class TestGenerateSign:
    """generate_sign 单元测试。"""

    def test_md5_format(self):
        sign = generate_sign({"a": "1", "b": "2"}, "mykey")
        # 应为大写 32 位十六进制
        assert re.fullmatch(r"[0-9A-F]{32}", sign)

    def test_hmac_sha256_format(self):
        sign = generate_sign({"a": "1"}, "mykey", SignType.HMAC_SHA256)
        assert re.fullmatch(r"[0-9A-F]{64}", sign)

    def test_md5_known_value(self):
        params = {"appid": "wxabc", "out_trade_no": "123", "total_fee": "101"}
        key = "testkey123456789"
        expected = hashlib.md5(
            b"appid=wxabc&out_trade_no=123&total_fee=101&key=testkey123456789"
        ).hexdigest().upper()
        assert generate_sign(params, key) == expected

    def test_hmac_sha256_known_value(self):
        params = {"a": "1", "b": "2"}
        expected = hmac.new(b"k", b"a=1&b=2&key=k", hashlib.sha256).hexdigest().upper()
        assert generate_sign(params, "k", SignType.HMAC_SHA256) == expected

    def test_insertion_order_irrelevant(self):
        """不同插入顺序应产生相同签名。"""
        params_a = {"z": "1", "a": "2", "m": "3"}
        params_b = {"a": "2", "m": "3", "z": "1"}
        assert generate_sign(params_a, "k") == generate_sign(params_b, "k")

    def test_existing_sign_ignored(self):
        base = {"a": "1", "b": "2"}
        with_sign = {"a": "1", "b": "2", "sign": "WHATEVER"}
        for sign_type in SignType:
            assert generate_sign(base, "k", sign_type) == generate_sign(with_sign, "k", sign_type)

    def test_empty_values_ignored(self):
        """空值参数不参与签名。"""
        assert generate_sign({"a": "1"}, "k") == generate_sign({"a": "1", "c": ""}, "k")

    def test_algorithms_differ(self):
        params = {"a": "1"}
        assert generate_sign(params, "k", SignType.MD5) != generate_sign(
            params, "k", SignType.HMAC_SHA256
        )

    def test_non_ascii_values(self):
        params = {"body": "测试商品"}
        expected = hashlib.md5("body=测试商品&key=k".encode("utf-8")).hexdigest().upper()
        assert generate_sign(params, "k") == expected


class TestVerifySign:
    """verify_sign 单元测试。"""

    def test_valid_sign(self):
        params = {"appid": "wxabc", "total_fee": "1"}
        for sign_type in SignType:
            signed = dict(params, sign=generate_sign(params, "secret", sign_type))
            assert verify_sign(signed, "secret", sign_type) is True

    def test_missing_sign_is_invalid(self):
        assert verify_sign({"a": "1"}, "secret") is False

    def test_wrong_key_fails(self):
        params = {"a": "1"}
        signed = dict(params, sign=generate_sign(params, "correct_key"))
        assert verify_sign(signed, "wrong_key") is False

    def test_tampered_value_fails(self):
        params = {"a": "1", "b": "2"}
        signed = dict(params, sign=generate_sign(params, "k"))
        signed["b"] = "3"
        assert verify_sign(signed, "k") is False

    def test_lowercase_sign_rejected(self):
        """比较区分大小写。"""
        params = {"a": "1"}
        signed = dict(params, sign=generate_sign(params, "k").lower())
        assert verify_sign(signed, "k") is False

    def test_wrong_algorithm_fails(self):
        params = {"a": "1"}
        signed = dict(params, sign=generate_sign(params, "k", SignType.MD5))
        assert verify_sign(signed, "k", SignType.HMAC_SHA256) is False

    def test_non_ascii_sign_is_invalid(self):
        assert verify_sign({"a": "1", "sign": "签名"}, "k") is False


class TestGenerateNonceStr:
    """generate_nonce_str 单元测试。"""

    def test_default_length(self):
        assert len(generate_nonce_str()) == 32

    def test_custom_length(self):
        assert len(generate_nonce_str(16)) == 16
        assert generate_nonce_str(0) == ""

    def test_alphabet(self):
        assert len(NONCE_ALPHABET) == 62
        assert set(generate_nonce_str(500)) <= set(NONCE_ALPHABET)

    def test_values_differ(self):
        assert generate_nonce_str() != generate_nonce_str()
