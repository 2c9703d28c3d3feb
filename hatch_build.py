#
# Set a dynamic version number, see https://hatch.pypa.io/dev/how-to/config/dynamic-metadata/
# At release time, override with env var: FEDIFINGER_RELEASE_VERSION=y
#

from datetime import datetime
import os

from hatchling.metadata.plugin.interface import MetadataHookInterface


class JSONMetaDataHook(MetadataHookInterface):
    def update(self, metadata):
        base_version = self.config['base-version']
        if os.environ.get('FEDIFINGER_RELEASE_VERSION', '').lower() == 'y':
            metadata['version'] = base_version
        else:
            metadata['version'] = base_version + '.dev' + datetime.now().strftime("%Y%m%d%H%M%S")
