import logging

from web3 import AsyncWeb3
from web3.types import BlockData

from .actions import ActionProducer, TransferERC20, WithdrawStake, collect_sponsored_transactions
from .bundle_builder import EmptyBundleError, build_bundle
from .bundle_submitter import BundleSubmitter
from .config import RescueConfig
from .gas import calculate_gas_estimates
from .models import BundleResolution, Identities
from .utils.contract_utility import ContractUtility
from .utils.formatting import gas_price_to_gwei, print_transactions
from .utils.relay_utility import RelayUtility

# Get logger for this module
logger = logging.getLogger(__name__)


class BundleRescuer:
    """
    Rescue pipeline that funds a compromised account from a sponsor and
    moves its assets to a safe destination in one atomic relay bundle.
    """

    def __init__(
        self,
        config: RescueConfig,
        producers: list[ActionProducer] | None = None
    ) -> None:
        """
        Initialize the BundleRescuer with configuration.
        
        :param config: Rescue configuration object
        :param producers: Rescue actions; built from config.actions when omitted
        """
        self.config = config
        self.config.log_config()
        
        self.identities: Identities = config.accounts.identities()
        
        logger.debug(f"Connecting to chain at {config.chain.rpc_url}")
        self.contract_utility = ContractUtility(config.chain.rpc_url)
        self.w3: AsyncWeb3 = self.contract_utility.w3
        
        self.relay = RelayUtility(
            signer=self.identities.relay_signer,
            url=config.chain.relay_url,
            timeout=config.chain.request_timeout
        )
        self.bundle_submitter = BundleSubmitter(
            w3=self.w3,
            relay=self.relay,
            blocks_in_future=config.bundle.blocks_in_future,
            poll_interval=config.bundle.poll_interval
        )
        
        self.producers: list[ActionProducer] = (
            producers if producers is not None else self._build_producers()
        )
        for producer in self.producers:
            logger.info(f"Action: {producer.description()}")

    @classmethod
    def from_env(cls, simulate: bool = False) -> "BundleRescuer":
        """
        Create a BundleRescuer instance from environment variables.
        
        Raises:
            ValueError: If required environment variables are missing
        """
        return cls(RescueConfig.from_env(simulate=simulate))

    def _build_producers(self) -> list[ActionProducer]:
        """Stake withdrawal first so withdrawn tokens exist for the transfer."""
        actions = self.config.actions
        producers: list[ActionProducer] = []
        withdrawal: WithdrawStake | None = None
        
        if actions.staking_contract_address:
            withdrawal = WithdrawStake(
                self.w3,
                staking_address=actions.staking_contract_address,
                staker=self.identities.compromised.address
            )
            producers.append(withdrawal)
        
        if actions.token_contract_address:
            producers.append(TransferERC20(
                self.w3,
                sender=self.identities.compromised.address,
                recipient=self.identities.safe_destination,
                token_address=actions.token_contract_address,
                amount=actions.token_amount,
                released_by=withdrawal
            ))
        
        return producers

    async def run(self) -> BundleResolution:
        """
        Run the whole rescue once.
        
        :return: Relay resolution for the single target block
        :raises EmptyBundleError: If the actions produced no transactions
        """
        ids = self.identities
        
        sponsored_txs = await collect_sponsored_transactions(self.producers)
        for tx in sponsored_txs:
            logger.info(f"Sponsored tx: {tx.to_dict()}")
        if not sponsored_txs:
            raise EmptyBundleError(
                "Actions produced no rescue transactions; nothing to fund"
            )
        
        block: BlockData = await self.w3.eth.get_block("latest")
        gas = await calculate_gas_estimates(
            self.w3,
            sponsored_txs,
            default_sender=ids.compromised.address,
            priority_fee=self.config.bundle.priority_fee,
            block=block
        )
        
        bundle = build_bundle(
            ids,
            gas,
            sponsored_txs,
            funding_gas_limit=self.config.bundle.funding_gas_limit,
            safety_multiplier=self.config.bundle.safety_multiplier
        )
        signed = await self.bundle_submitter.sign_bundle(bundle)
        print_transactions(bundle, signed)
        
        logger.info(f"Executor Account: {ids.compromised.address}")
        logger.info(f"Sponsor Account: {ids.sponsor.address}")
        logger.info(f"Gas Price: {gas_price_to_gwei(gas.price)} gwei")
        logger.info(f"Gas Used: {gas.estimate_total}")
        
        if self.config.simulate:
            await self.bundle_submitter.simulate(signed)
        
        return await self.bundle_submitter.send_bundle(signed)
