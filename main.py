from rich.pretty import pprint

from argotree import *

backup = group("backup")


@backup.command("list", aliases=("ls",), flags=(
        Flag("a", next=lambda previous: {"l", "h"}),
        Flag("l", next=lambda previous: {"a", "h"}),
        Flag("h"),
        Option("format", ("json", "table")),
))
def show(identity, arguments):
    pprint(arguments)


if __name__ == '__main__':
    registration = register(backup, shell=True, colorful=True)
    pprint(registration.complete(None, "ls -a"))
    pprint(registration.complete(None, "ls --format "))
    registration.execute(None, "ls -al --format json")
    registration.execute(None, "")
