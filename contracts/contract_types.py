"""
Which contracts a song collaborator row needs.
"""
from rights.percentages import to_decimal
from rights.roles import ContractType

CONTRACT_TYPE_LABELS = {
    ContractType.SONGWRITER_PUBLISHING.value: 'Publishing Assignment',
    ContractType.DIGITAL_MASTER_ONLY.value: 'Master Revenue Share Agreement',
    ContractType.PRODUCER_AGREEMENT.value: 'Producer Agreement',
    ContractType.LABEL_RECORD.value: 'Label Record',
}

CONTRACT_TYPE_CHOICES = list(CONTRACT_TYPE_LABELS.items())


def get_required_contract_types(song_collaborator):
    """
    Publishing Assignment for any publishing share, Master Revenue Share
    Agreement for any master share, whatever the role.
    """
    required = []
    if to_decimal(song_collaborator.publishing_ownership) > 0:
        required.append(ContractType.SONGWRITER_PUBLISHING.value)
    if to_decimal(song_collaborator.master_ownership) > 0:
        required.append(ContractType.DIGITAL_MASTER_ONLY.value)
    return required


def get_contract_type_label(contract_type):
    return CONTRACT_TYPE_LABELS.get(contract_type, contract_type)
