import asyncio

from helmsman import *

__prog__ = "demo"


@command(options=[OptionSpec("-n", "--name", key="name", action="store", default="world", descr="Who to greet")])
async def greet(invocation, args):
    """Print a greeting."""
    invocation.log.always("hello, %s", invocation.config["name"])
    invocation.done()


@command(forwarding=True)
async def echo(invocation, args):
    """Print the arguments as received."""
    invocation.log.always(" ".join(invocation.remaining + invocation.tail))


@command
async def wait(invocation, args):
    """Sleep one second, asynchronously."""
    invocation.log.verbose("sleeping in %s", invocation.cwd)
    await asyncio.sleep(1)
    invocation.done()


if __name__ == '__main__':
    Application(
        CommandTree({"greet": greet, "echo": echo, "util": {"wait": wait}}),
        Manifest("demo", "0.0.0", "Helmsman demo application"),
    ).start()
