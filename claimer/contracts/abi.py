# Minimal ABIs for the calls the claimer makes.

DISTRIBUTOR_ABI = [
    {
        "type": "function",
        "stateMutability": "nonpayable",
        "name": "claim",
        "inputs": [
            {"name": "batchId", "type": "bytes32"},
            {"name": "token", "type": "address"},
            {"name": "account", "type": "address"},
            {"name": "amount", "type": "uint256"},
            {"name": "proof", "type": "bytes32[]"},
        ],
        "outputs": [],
    },
]

PARTICIPANT_REGISTRY_ABI = [
    {
        "type": "function",
        "stateMutability": "nonpayable",
        "name": "register",
        "inputs": [
            {"name": "who", "type": "address"},
            {"name": "roleMask", "type": "uint256"},
            {"name": "payout", "type": "address"},
            {"name": "meta", "type": "bytes32"},
        ],
        "outputs": [],
    },
]
