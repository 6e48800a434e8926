from dataclasses import dataclass


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: str = "default"  # "default" or "destructive"
