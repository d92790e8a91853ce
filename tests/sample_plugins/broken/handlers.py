from hibernia import command


@command("warp")
class WarpCommand:
    """Declares no execute() method."""
