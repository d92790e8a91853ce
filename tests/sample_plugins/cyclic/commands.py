from pydantic import BaseModel

from hibernia import command, config_schema


class ServiceA:
    def __init__(self, b: "ServiceB") -> None:
        self.b = b


class ServiceB:
    def __init__(self, a: ServiceA) -> None:
        self.a = a


@config_schema("cyclic")
class CyclicSettings(BaseModel):
    enabled: bool = True


@command("spin")
class SpinCommand:
    def __init__(self, a: ServiceA) -> None:
        self.a = a

    def execute(self, invoker, arguments):
        return "spun"
