from .cipher import ALPHABET_LOWER, ALPHABET_UPPER, GenieCode, decode, encode

__all__ = ["ALPHABET_LOWER", "ALPHABET_UPPER", "GenieCode", "decode", "encode"]
