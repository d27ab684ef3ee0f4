from udp_mqtt_gateway.gateway import run

run()
