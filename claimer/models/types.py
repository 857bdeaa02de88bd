# type aliases for clarity
EthereumAddress = str
BigNumber = str
Bytes32 = str
