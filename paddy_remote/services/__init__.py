# Service layer for the Paddy Core remote
# - commands:    wire codec (outbound command records, inbound payload decoding)
# - link_client: WebSocket link to the onboard controller (reconnect, intents, fan-out)
