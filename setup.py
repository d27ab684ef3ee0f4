from setuptools import find_packages, setup

setup(
    name="udp-mqtt-gateway",
    version="1.0.0",
    description="Forwards UDP datagrams unchanged to an MQTT broker topic",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    package_data={
        "udp_mqtt_gateway.config": ["udpmqttgw.conf"],
    },
    python_requires=">=3.8",
    install_requires=["paho-mqtt>=2.0"],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": ["udpmqttgw=udp_mqtt_gateway.gateway:run"],
    },
)
