from hibernia import command


@command("reload")
def reload_config(invoker, arguments):
    return "config"


@command("reload")
def reload_all(invoker, arguments):
    return "all"
