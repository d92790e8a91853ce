from hibernia import listener
from sample_plugins.economy.events import PlayerJoinEvent


@listener(PlayerJoinEvent)
def on_join(event):
    pass
