from rich.pretty import pprint

from tether import *

__prog__ = "bank"


class Bank:
    def __init__(self):
        self.loans = []

    @alias("lend")
    def lend_money(self, name: str, amount: int) -> bool:
        if amount < 200:
            self.loans.append((name, amount))
            return True
        return False


if __name__ == '__main__':
    bank = Bank()
    binding = bind(bank, "lend", shell=True)
    pprint(binding)

    for prompt in ("Luke 100", "Luke 250", "--amount=50 Alice", "Luke", "Luke abc"):
        pprint(binding.invoke(prompt))
    pprint(bank.loans)
