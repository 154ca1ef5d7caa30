class ErrorCodes:
    ERR_NETWORK = 101
    ERR_MALFORMED_FRAME = 201
    ERR_UNKNOWN_EVENT = 202
    ERR_INVALID_PAYLOAD = 203

class PairupError(Exception):
    def __init__(self, code, message):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")
