import os


class Logger:
    """Coloured console output for scenario runs"""

    GREEN = "\033[0;32m"
    YELLOW = "\033[1;33m"
    RED = "\033[0;31m"
    BLUE = "\033[0;34m"
    CYAN = "\033[0;36m"
    NC = "\033[0m"

    @classmethod
    def step(cls, msg: str):
        print(f"{cls.GREEN}[STEP]{cls.NC} {msg}")

    @classmethod
    def info(cls, msg: str):
        print(f"{cls.YELLOW}[INFO]{cls.NC} {msg}")

    @classmethod
    def success(cls, msg: str):
        print(f"{cls.GREEN}[SUCCESS]{cls.NC} {msg}")

    @classmethod
    def warning(cls, msg: str):
        print(f"{cls.CYAN}[WARNING]{cls.NC} {msg}")

    @classmethod
    def error(cls, msg: str):
        print(f"{cls.RED}[ERROR]{cls.NC} {msg}")

    @classmethod
    def debug(cls, msg: str):
        if os.environ.get("DEBUG") == "1":
            print(f"{cls.BLUE}[DEBUG]{cls.NC} {msg}")

    @classmethod
    def transaction(cls, function_name: str, tx_hash: str):
        print(f"{function_name} | Hash: {tx_hash}")
